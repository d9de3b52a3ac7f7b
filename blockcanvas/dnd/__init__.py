"""
Drag and drop for the block canvas.

This package turns browser drag events into tree mutations:
- DragCoordinator: gesture state, one DropResult per drag
- StaticSpatialIndex: hit testing over measured rectangles
- apply_drop_result: DropResult -> tree mutation
- DropIndicatorOverlay: insertion indicator rendering (NiceGUI)
- setup_drag_handlers: event handlers for app.py integration

Usage:
    from blockcanvas.dnd import DragCoordinator, StaticSpatialIndex, apply_drop_result
    from blockcanvas.dnd.handlers import setup_drag_handlers
"""

from blockcanvas.dnd.constants import (
    CANVAS_ID,
    LIBRARY_ID,
    VERTICAL,
    HORIZONTAL,
    INDICATOR_SLOT_HEIGHT,
)
from blockcanvas.dnd.geometry import Rect, compute_index_from_pointer, indicator_position
from blockcanvas.dnd.spatial import SpatialIndex, StaticSpatialIndex
from blockcanvas.dnd.coordinator import DragCoordinator, DragState, DropLocation, DropResult
from blockcanvas.dnd.dispatch import DropOutcome, apply_drop_result, resolve_container

__all__ = [
    'DragCoordinator',
    'DragState',
    'DropLocation',
    'DropResult',
    'SpatialIndex',
    'StaticSpatialIndex',
    'Rect',
    'compute_index_from_pointer',
    'indicator_position',
    'DropOutcome',
    'apply_drop_result',
    'resolve_container',
    'CANVAS_ID',
    'LIBRARY_ID',
    'VERTICAL',
    'HORIZONTAL',
    'INDICATOR_SLOT_HEIGHT',
]
