"""Tests for the static spatial index."""

import pytest

from blockcanvas.dnd.constants import HORIZONTAL, VERTICAL
from blockcanvas.dnd.geometry import Rect
from blockcanvas.dnd.spatial import SpatialIndex, StaticSpatialIndex


@pytest.fixture
def index():
    """
    canvas (0,0 400x400)
      g1 item (0,0 400x200) owning container g1 (10,30 380x160)
        x item (10,40 380x40)
      b item (0,210 400x40)
    """
    idx = StaticSpatialIndex()
    idx.register_container("canvas", Rect(0, 0, 400, 400))
    idx.register_item("canvas", "g1", Rect(0, 0, 400, 200))
    idx.register_item("canvas", "b", Rect(0, 210, 400, 40))
    idx.register_container("g1", Rect(10, 30, 380, 160), owner_item="g1")
    idx.register_item("g1", "x", Rect(10, 40, 380, 40))
    return idx


def test_satisfies_protocol(index):
    assert isinstance(index, SpatialIndex)


def test_container_at_prefers_innermost(index):
    assert index.container_at(50, 50) == "g1"
    assert index.container_at(50, 300) == "canvas"
    assert index.container_at(500, 500) is None


def test_item_rects_in_order(index):
    assert index.item_rects("canvas") == [Rect(0, 0, 400, 200), Rect(0, 210, 400, 40)]
    assert index.item_rects("unknown") == []


def test_enclosing_container(index):
    assert index.enclosing_container("x") == "g1"
    assert index.enclosing_container("b") == "canvas"
    assert index.enclosing_container("ghost") is None


def test_is_inside_item(index):
    assert index.is_inside_item("g1", "g1")
    assert not index.is_inside_item("canvas", "g1")
    assert not index.is_inside_item("g1", "b")


def test_is_inside_item_walks_ancestry(index):
    index.register_container("inner", Rect(20, 45, 300, 30), owner_item="x")
    assert index.is_inside_item("inner", "x")
    assert index.is_inside_item("inner", "g1")
    assert not index.is_inside_item("inner", "b")


def test_register_item_requires_container():
    idx = StaticSpatialIndex()
    with pytest.raises(KeyError):
        idx.register_item("nope", "a", Rect(0, 0, 1, 1))


def test_unknown_orientation_rejected():
    with pytest.raises(ValueError):
        StaticSpatialIndex().register_container("c", Rect(0, 0, 1, 1), orientation="diagonal")


def test_from_snapshot():
    payload = {
        'containers': [
            {'id': 'canvas', 'rect': {'left': 0, 'top': 0, 'width': 300, 'height': 300}, 'orientation': 'vertical', 'owner': None},
            {'id': 'row', 'rect': {'left': 0, 'top': 0, 'width': 300, 'height': 50}, 'orientation': 'horizontal', 'owner': 'btns'},
        ],
        'items': [
            {'id': 'btns', 'container': 'canvas', 'rect': {'left': 0, 'top': 0, 'width': 300, 'height': 60}},
            {'id': 'b1', 'container': 'row', 'rect': {'left': 0, 'top': 0, 'width': 100, 'height': 50}},
            {'id': 'lost', 'container': 'missing', 'rect': {}},
        ],
    }
    idx = StaticSpatialIndex.from_snapshot(payload)
    assert idx.orientation('row') == HORIZONTAL
    assert idx.orientation('canvas') == VERTICAL
    assert idx.item_ids('canvas') == ['btns']
    assert idx.enclosing_container('b1') == 'row'
    assert idx.enclosing_container('lost') is None
    assert idx.is_inside_item('row', 'btns')
    assert idx.container_at(10, 10) == 'row'
