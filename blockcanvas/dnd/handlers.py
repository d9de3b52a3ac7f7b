"""
Drag Handlers - NiceGUI event wiring for the block canvas.

Keeps the browser event plumbing out of app.py. The page binds the returned
handlers to its elements; everything else goes through the DragCoordinator.
"""

import logging
from typing import Any, Callable, Dict, Optional, Tuple

from nicegui import ui

from blockcanvas.dnd.coordinator import DragCoordinator, DropResult
from blockcanvas.dnd.dispatch import apply_drop_result
from blockcanvas.dnd.overlay import DropIndicatorOverlay
from blockcanvas.dnd.spatial import StaticSpatialIndex

logger = logging.getLogger(__name__)

SNAPSHOT_TIMEOUT = 1.0

# Event fields requested from the browser for pointer events
POINTER_KEYS = ['clientX', 'clientY']


def event_point(event) -> Optional[Tuple[float, float]]:
    """Pointer position from a NiceGUI event (or its raw args)."""
    raw = event.args if hasattr(event, 'args') else event
    if isinstance(raw, dict):
        x, y = raw.get('clientX'), raw.get('clientY')
    elif isinstance(raw, (list, tuple)) and len(raw) >= 2:
        x, y = raw[0], raw[1]
    else:
        return None
    if x is None or y is None:
        return None
    return float(x), float(y)


def snapshot_index(payload) -> StaticSpatialIndex:
    """Spatial index for a browser layout snapshot; empty when none arrived."""
    if isinstance(payload, dict):
        return StaticSpatialIndex.from_snapshot(payload)
    return StaticSpatialIndex()


def setup_drag_handlers(
    state: Dict[str, Any],
    coordinator: DragCoordinator,
    overlay: DropIndicatorOverlay,
    registry,
    history,
    refresh_canvas: Callable,
    schedule_save: Callable,
):
    """
    Set up all drag and drop event handlers.

    Args:
        state: Page state dictionary ('selected_id' is updated after drops)
        coordinator: DragCoordinator for this page
        overlay: DropIndicatorOverlay, already set up
        registry: BlockTypeRegistry used for palette drops
        history: EditHistory holding the current tree
        refresh_canvas: Function to re-render the canvas
        schedule_save: Function to schedule a debounced save

    Returns:
        Dict with handler functions for binding to UI events
    """

    def on_drag_state_change(drag_state):
        """Called whenever the coordinator state changes - update overlay."""
        if coordinator.spatial_index is None:
            overlay.hide()
            return
        overlay.update(drag_state, coordinator.spatial_index)

    coordinator.set_on_state_change(on_drag_state_change)

    def on_drop_result(result: DropResult):
        if result.is_cancel:
            return
        try:
            outcome = apply_drop_result(history.current, result, registry)
        except Exception as e:
            logger.exception(f"Applying drop of {result.dragged_id} failed")
            ui.notify(f'Drop failed: {e}', type='negative', position='bottom')
            return

        if not outcome.changed:
            if outcome.message:
                ui.notify(outcome.message, type='warning', position='bottom', timeout=1500)
            return

        history.push(outcome.tree)
        if outcome.selected_id:
            state['selected_id'] = outcome.selected_id
        refresh_canvas()
        schedule_save()

    coordinator.set_on_result(on_drop_result)

    async def handle_drag_start(dragged_id: str, source_index: int, source_container_id: str):
        """A card or palette item started dragging; measure the layout for hit testing."""
        drag_state = coordinator.start(dragged_id, source_index, source_container_id)
        if drag_state.dragged_id != dragged_id:
            return
        try:
            payload = await ui.run_javascript('return window.blockCanvasSnapshot();', timeout=SNAPSHOT_TIMEOUT)
        except TimeoutError:
            logger.warning("Layout snapshot timed out; hit testing disabled for this drag")
            payload = None
        coordinator.set_spatial_index(snapshot_index(payload))

    def handle_drag_over(event):
        point = event_point(event)
        if point is None:
            return
        coordinator.hover(*point)

    def handle_drag_leave(container_id: str):
        coordinator.leave(container_id)

    def handle_drop(event):
        point = event_point(event)
        if point is None:
            return
        coordinator.drop(*point)

    def handle_drag_end(event):
        point = event_point(event)
        if point is None:
            coordinator.end()
        else:
            coordinator.end(*point)

    def handle_keyboard(e):
        """Escape aborts the current drag."""
        if e.key == 'Escape' and e.action.keydown and coordinator.state.is_dragging:
            coordinator.cancel()

    return {
        'handle_drag_start': handle_drag_start,
        'handle_drag_over': handle_drag_over,
        'handle_drag_leave': handle_drag_leave,
        'handle_drop': handle_drop,
        'handle_drag_end': handle_drag_end,
        'handle_keyboard': handle_keyboard,
    }
