"""
Tests for local page storage.
"""

import json

import pytest

from blockcanvas.storage import FilePageStore, PageStorage, create_page_store, empty_page
from conftest import columns, group, leaf


@pytest.fixture
def store(tmp_path):
    return FilePageStore(tmp_path / "pages")


def test_satisfies_protocol(store):
    assert isinstance(store, PageStorage)
    assert store.backend_type == "file"


def test_missing_page_is_empty(store):
    assert store.load_page("home") == empty_page("home")


def test_save_and_load(store):
    blocks = [group("A", [leaf("X", "A")]), leaf("B")]
    store.save_page("home", {"title": "Home", "blocks": blocks})

    page = store.load_page("home")
    assert page["title"] == "Home"
    assert page["blocks"] == blocks
    assert not list(store.pages_dir.glob("*.tmp"))


def test_corrupt_file_falls_back_to_empty(store):
    (store.pages_dir / "broken.json").write_text("{not json", encoding="utf-8")
    assert store.load_page("broken") == empty_page("broken")


def test_load_repairs_structure(store):
    stale = [
        group("A", [leaf("X", "wrong")]),
        columns("cols", [["a"], []], [leaf("a", "cols"), leaf("b", "cols")]),
    ]
    with open(store.pages_dir / "home.json", "w", encoding="utf-8") as f:
        json.dump({"title": "Home", "blocks": stale}, f)

    page = store.load_page("home")
    assert page["blocks"][0]["children"][0]["parent_id"] == "A"
    layout = page["blocks"][1]["settings"]["column_layout"]
    assert [c["block_ids"] for c in layout] == [["a"], ["b"]]


def test_non_list_blocks(store):
    (store.pages_dir / "odd.json").write_text('{"title": "Odd", "blocks": {}}', encoding="utf-8")
    page = store.load_page("odd")
    assert page["blocks"] == []
    assert page["title"] == "Odd"


def test_list_and_delete(store):
    store.save_page("b-page", {"title": "Beta", "blocks": []})
    store.save_page("a-page", {"title": "alpha", "blocks": []})
    assert store.list_pages() == [{"id": "a-page", "title": "alpha"}, {"id": "b-page", "title": "Beta"}]

    store.delete_page("a-page")
    assert [p["id"] for p in store.list_pages()] == ["b-page"]
    store.delete_page("a-page")


def test_create_page(store):
    page_id = store.create_page("Landing")
    assert store.load_page(page_id)["title"] == "Landing"


def test_rejects_path_like_ids(store):
    with pytest.raises(ValueError):
        store.load_page("../etc/passwd")


def test_create_page_store_with_explicit_dir(tmp_path):
    store = create_page_store(tmp_path / "custom")
    assert store.pages_dir == tmp_path / "custom"
    assert store.pages_dir.is_dir()
