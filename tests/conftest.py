"""Shared fixtures for blockcanvas tests."""

import itertools

import pytest

from blockcanvas.tree.registry import BlockTypeRegistry


@pytest.fixture
def registry():
    """Registry with only the built-in core/* types."""
    return BlockTypeRegistry()


@pytest.fixture
def id_gen():
    """Deterministic id generator: new-1, new-2, ..."""
    counter = itertools.count(1)
    return lambda: f"new-{next(counter)}"


def leaf(block_id, parent_id=None, block_type="core/paragraph", text=""):
    return {
        "id": block_id,
        "kind": "block",
        "type": block_type,
        "parent_id": parent_id,
        "content": {"kind": "text", "value": text},
        "styles": {},
        "settings": {},
    }


def group(block_id, children, parent_id=None):
    return {
        "id": block_id,
        "kind": "container",
        "type": "core/group",
        "parent_id": parent_id,
        "content": {},
        "styles": {},
        "settings": {},
        "children": children,
    }


def columns(block_id, layout, children, parent_id=None):
    """Column container; layout is a list of id lists, one per column."""
    return {
        "id": block_id,
        "kind": "container",
        "type": "core/columns",
        "parent_id": parent_id,
        "content": {},
        "styles": {},
        "settings": {
            "column_layout": [
                {"column_id": f"col-{i + 1}", "width": f"{100 // len(layout)}%", "block_ids": list(ids)}
                for i, ids in enumerate(layout)
            ],
        },
        "children": children,
    }


def ids_of(blocks):
    return [b["id"] for b in blocks]
