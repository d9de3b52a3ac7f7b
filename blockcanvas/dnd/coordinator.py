"""
Drag Coordinator - single source of truth for an in-flight drag gesture.

Tracks the dragged item, the last container/index under the pointer and
whether the gesture already produced a result. Browser events arrive in
whatever order the platform sends them; the coordinator turns them into
exactly one DropResult per gesture:
- a native drop on a container commits immediately
- otherwise drag end falls back to the cached over-state, then to a
  geometry lookup at the final pointer position, then to cancellation

Geometry comes from a SpatialIndex, so the coordinator runs headless in tests.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Set

from blockcanvas.dnd.geometry import compute_index_from_pointer
from blockcanvas.dnd.spatial import SpatialIndex

logger = logging.getLogger(__name__)

DROP = "DROP"
CANCEL = "CANCEL"


@dataclass(frozen=True)
class DropLocation:
    container_id: str
    index: int


@dataclass(frozen=True)
class DropResult:
    """Outcome of one drag gesture; destination is None for a cancel."""
    dragged_id: str
    source: DropLocation
    destination: Optional[DropLocation] = None
    reason: str = DROP

    @property
    def is_cancel(self) -> bool:
        return self.reason == CANCEL


@dataclass(frozen=True)
class DragState:
    """Immutable snapshot of the current drag."""
    dragged_id: Optional[str] = None
    source: Optional[DropLocation] = None
    over: Optional[DropLocation] = None
    indicator_visible: bool = False
    pointer_x: float = 0
    pointer_y: float = 0

    @property
    def is_dragging(self) -> bool:
        return self.dragged_id is not None


class DragCoordinator:
    """Resolves drag events into DropResults."""

    def __init__(self, spatial_index: Optional[SpatialIndex] = None):
        self._state = DragState()
        self._index = spatial_index
        self._committed = False
        self._disabled: Set[str] = set()
        self._on_result: Optional[Callable[[DropResult], None]] = None
        self._on_state_change: Optional[Callable[[DragState], None]] = None

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def spatial_index(self) -> Optional[SpatialIndex]:
        return self._index

    def set_spatial_index(self, spatial_index: SpatialIndex):
        self._index = spatial_index

    def set_on_result(self, callback: Callable[[DropResult], None]):
        self._on_result = callback

    def set_on_state_change(self, callback: Callable[[DragState], None]):
        self._on_state_change = callback

    def set_drop_disabled(self, container_id: str, disabled: bool = True):
        if disabled:
            self._disabled.add(container_id)
        else:
            self._disabled.discard(container_id)

    def is_drop_disabled(self, container_id: str) -> bool:
        return container_id in self._disabled

    def start(self, dragged_id: str, source_index: int,
              source_container_id: Optional[str] = None) -> DragState:
        """Begin a drag. Nested starts (a parent card seeing the same gesture) are ignored."""
        if self._state.is_dragging:
            logger.debug(f"Ignoring drag start of {dragged_id}: {self._state.dragged_id} is active")
            return self._state

        if source_container_id is None and self._index is not None:
            source_container_id = self._index.enclosing_container(dragged_id)
        if source_container_id is None:
            logger.warning(f"Drag start of {dragged_id} outside any drop container")
            return self._state

        self._committed = False
        self._state = DragState(
            dragged_id=dragged_id,
            source=DropLocation(source_container_id, source_index),
        )
        logger.debug(f"Drag start {dragged_id} from {source_container_id}[{source_index}]")
        self._notify_change()
        return self._state

    def hover(self, x: float, y: float, container_id: Optional[str] = None) -> DragState:
        """Pointer moved over the canvas; update the over-state and indicator."""
        if not self._state.is_dragging:
            return self._state

        location = self._locate(x, y, container_id)
        if location is None:
            if not self._state.indicator_visible:
                return self._state
            # Nothing under the pointer: hide the indicator, keep the over-state
            self._state = DragState(
                dragged_id=self._state.dragged_id,
                source=self._state.source,
                over=self._state.over,
                indicator_visible=False,
                pointer_x=x,
                pointer_y=y,
            )
            self._notify_change()
            return self._state

        self._state = DragState(
            dragged_id=self._state.dragged_id,
            source=self._state.source,
            over=location,
            indicator_visible=True,
            pointer_x=x,
            pointer_y=y,
        )
        self._notify_change()
        return self._state

    def leave(self, container_id: str) -> DragState:
        """Pointer left a container. The over-state stays as the drop fallback."""
        over = self._state.over
        if not self._state.is_dragging or over is None or over.container_id != container_id:
            return self._state
        self._state = DragState(
            dragged_id=self._state.dragged_id,
            source=self._state.source,
            over=over,
            indicator_visible=False,
            pointer_x=self._state.pointer_x,
            pointer_y=self._state.pointer_y,
        )
        self._notify_change()
        return self._state

    def drop(self, x: float, y: float, container_id: Optional[str] = None) -> Optional[DropResult]:
        """Native drop on a container. Commits that container at the pointer index."""
        if not self._state.is_dragging:
            return None

        if container_id is None and self._index is not None:
            container_id = self._index.container_at(x, y)
        if container_id is None or self.is_drop_disabled(container_id):
            return None

        if self._inside_dragged(container_id):
            logger.debug(f"Ignoring drop into {container_id}: inside dragged {self._state.dragged_id}")
            self._state = DragState(dragged_id=self._state.dragged_id, source=self._state.source)
            self._notify_change()
            return None

        return self._emit(DropLocation(container_id, self._index_at(container_id, x, y)))

    def end(self, x: Optional[float] = None, y: Optional[float] = None,
            destination: Optional[DropLocation] = None) -> Optional[DropResult]:
        """
        Drag end from the dragged element.

        Suppressed when a drop already committed this gesture. Otherwise the
        destination is, in order: the one given, the cached over-state, the
        container under (x, y); failing all three the drag is cancelled. A
        given destination that is disabled or inside the dragged element is
        skipped like any other invalid target.
        """
        if self._committed:
            self._committed = False
            logger.debug("Drag end after committed drop")
            return None
        if not self._state.is_dragging:
            return None

        if destination is not None and not self._accepts(destination.container_id):
            logger.debug(f"Ignoring drag end destination {destination.container_id}")
            destination = None
        if destination is None:
            destination = self._state.over
        if destination is None and x is not None and y is not None:
            destination = self._locate(x, y)
        return self._emit(destination)

    def cancel(self) -> Optional[DropResult]:
        if not self._state.is_dragging:
            return None
        return self._emit(None)

    def _emit(self, destination: Optional[DropLocation]) -> DropResult:
        result = DropResult(
            dragged_id=self._state.dragged_id,
            source=self._state.source,
            destination=destination,
            reason=DROP if destination else CANCEL,
        )
        # Reset before notifying so a listener can start a new drag
        self._state = DragState()
        self._committed = True
        logger.debug(f"Drag result {result.reason} {result.dragged_id} -> {destination}")
        self._notify_change()
        if self._on_result:
            self._on_result(result)
        return result

    def _locate(self, x: float, y: float, container_id: Optional[str] = None) -> Optional[DropLocation]:
        if container_id is None:
            if self._index is None:
                return None
            container_id = self._index.container_at(x, y)
        if container_id is None or not self._accepts(container_id):
            return None
        return DropLocation(container_id, self._index_at(container_id, x, y))

    def _accepts(self, container_id: str) -> bool:
        return not self.is_drop_disabled(container_id) and not self._inside_dragged(container_id)

    def _inside_dragged(self, container_id: str) -> bool:
        if self._index is None:
            return False
        return self._index.is_inside_item(container_id, self._state.dragged_id)

    def _index_at(self, container_id: str, x: float, y: float) -> int:
        if self._index is None:
            return 0
        rects = self._index.item_rects(container_id)
        return compute_index_from_pointer(rects, x, y, self._index.orientation(container_id))

    def _notify_change(self):
        if self._on_state_change:
            self._on_state_change(self._state)
