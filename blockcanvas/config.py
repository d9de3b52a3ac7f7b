"""
Configuration management for blockcanvas.

Handles persistent editor configuration:
- Log level
- Undo history size
- Page storage location
- Autosave delay

Config is stored in config.json next to the executable/project root.
Environment variables (BLOCKCANVAS_<KEY>) always win over the file.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from blockcanvas.paths import get_config_path, get_pages_dir

ENV_PREFIX = "BLOCKCANVAS_"

DEFAULTS = {
    "log_level": "INFO",
    "history_limit": 50,
    "pages_dir": None,  # None -> paths.get_pages_dir()
    "autosave_delay": 1.0,
}


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration from config.json."""
    config_path = config_path or get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError):
            return {}
    return {}


def save_config(config: dict, config_path: Optional[Path] = None) -> None:
    """Save configuration to config.json."""
    config_path = config_path or get_config_path()
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=2)


def get_setting(key: str, config_path: Optional[Path] = None) -> Any:
    """
    Get a single setting.

    Priority:
    1. Environment variable BLOCKCANVAS_<KEY>
    2. Stored in config.json
    3. Built-in default
    """
    env_value = os.environ.get(ENV_PREFIX + key.upper())
    if env_value is not None:
        return _coerce(key, env_value)

    config = load_config(config_path)
    if key in config:
        return config[key]
    return DEFAULTS.get(key)


def set_setting(key: str, value: Any, config_path: Optional[Path] = None) -> None:
    """Persist a single setting to config.json."""
    config = load_config(config_path)
    config[key] = value
    save_config(config, config_path)


def _coerce(key: str, raw: str) -> Any:
    # Env values are strings; follow the type of the default where there is one
    default = DEFAULTS.get(key)
    try:
        if isinstance(default, bool):
            return raw.strip().lower() in ("1", "true", "yes", "on")
        if isinstance(default, int):
            return int(raw)
        if isinstance(default, float):
            return float(raw)
    except ValueError:
        return default
    return raw


def get_history_limit(config_path: Optional[Path] = None) -> int:
    limit = get_setting("history_limit", config_path)
    try:
        return max(1, int(limit))
    except (TypeError, ValueError):
        return DEFAULTS["history_limit"]


def get_pages_dir_setting(config_path: Optional[Path] = None) -> Path:
    """Return the configured page directory, falling back to db/pages."""
    value = get_setting("pages_dir", config_path)
    return Path(value) if value else get_pages_dir()


def configure_logging(config_path: Optional[Path] = None) -> None:
    """Configure root logging from the log_level setting."""
    level_name = str(get_setting("log_level", config_path) or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def get_autosave_delay(config_path: Optional[Path] = None) -> float:
    delay = get_setting("autosave_delay", config_path)
    try:
        return max(0.1, float(delay))
    except (TypeError, ValueError):
        return DEFAULTS["autosave_delay"]
