"""Tests for configuration loading."""

import json
import logging

import pytest

from blockcanvas import config
from blockcanvas.config import (
    DEFAULTS,
    get_autosave_delay,
    get_history_limit,
    get_pages_dir_setting,
    get_setting,
    load_config,
    set_setting,
)


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    for key in DEFAULTS:
        monkeypatch.delenv(config.ENV_PREFIX + key.upper(), raising=False)
    return tmp_path / "config.json"


def test_defaults_when_file_missing(config_path):
    assert load_config(config_path) == {}
    assert get_setting("history_limit", config_path) == 50
    assert get_setting("log_level", config_path) == "INFO"


def test_file_overrides_default(config_path):
    set_setting("history_limit", 10, config_path)
    assert json.loads(config_path.read_text())["history_limit"] == 10
    assert get_history_limit(config_path) == 10


def test_env_overrides_file(config_path, monkeypatch):
    set_setting("autosave_delay", 5.0, config_path)
    monkeypatch.setenv("BLOCKCANVAS_AUTOSAVE_DELAY", "0.5")
    assert get_autosave_delay(config_path) == 0.5


def test_bad_env_value_falls_back(config_path, monkeypatch):
    monkeypatch.setenv("BLOCKCANVAS_HISTORY_LIMIT", "lots")
    assert get_history_limit(config_path) == DEFAULTS["history_limit"]


def test_corrupt_config_file(config_path):
    config_path.write_text("{oops", encoding="utf-8")
    assert load_config(config_path) == {}


def test_pages_dir_setting(config_path, tmp_path):
    set_setting("pages_dir", str(tmp_path / "elsewhere"), config_path)
    assert get_pages_dir_setting(config_path) == tmp_path / "elsewhere"


def test_configure_logging_level(config_path, monkeypatch):
    calls = {}
    monkeypatch.setenv("BLOCKCANVAS_LOG_LEVEL", "debug")
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))
    config.configure_logging(config_path)
    assert calls["level"] == logging.DEBUG
