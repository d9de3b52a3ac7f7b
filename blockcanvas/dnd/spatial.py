"""
Spatial queries used by the drag coordinator.

The coordinator never touches the DOM. It asks a SpatialIndex which drop
container is under the pointer, where that container's items are, and whether
a container sits inside the element being dragged. StaticSpatialIndex answers
those questions from registered rectangles, either built by hand or from the
layout snapshot the browser sends at drag start.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from blockcanvas.dnd.constants import HORIZONTAL, VERTICAL
from blockcanvas.dnd.geometry import Rect

logger = logging.getLogger(__name__)


@runtime_checkable
class SpatialIndex(Protocol):
    """What the coordinator needs to know about the rendered layout."""

    def container_at(self, x: float, y: float) -> Optional[str]:
        """Innermost drop container under the point, if any."""
        ...

    def container_rect(self, container_id: str) -> Optional[Rect]:
        ...

    def item_rects(self, container_id: str) -> List[Rect]:
        """Bounding boxes of the container's direct items, in order."""
        ...

    def orientation(self, container_id: str) -> str:
        ...

    def enclosing_container(self, item_id: str) -> Optional[str]:
        """Nearest drop container that holds the draggable item."""
        ...

    def is_inside_item(self, container_id: str, item_id: str) -> bool:
        """True if the container is rendered inside the item."""
        ...


@dataclass
class _Container:
    rect: Rect
    orientation: str = VERTICAL
    owner_item: Optional[str] = None


class StaticSpatialIndex:
    """SpatialIndex over fixed rectangles."""

    def __init__(self):
        self._containers: Dict[str, _Container] = {}
        self._items: Dict[str, List[Tuple[str, Rect]]] = {}
        self._item_container: Dict[str, str] = {}

    def register_container(self, container_id: str, rect: Rect,
                           orientation: str = VERTICAL,
                           owner_item: Optional[str] = None) -> None:
        """
        Add a drop container.

        owner_item is the draggable the container is rendered inside (e.g. the
        group block whose children list this is); None for top-level lists.
        """
        if orientation not in (VERTICAL, HORIZONTAL):
            raise ValueError(f"Unknown orientation: {orientation}")
        self._containers[container_id] = _Container(rect, orientation, owner_item)
        self._items.setdefault(container_id, [])

    def register_item(self, container_id: str, item_id: str, rect: Rect) -> None:
        """Append a draggable item to a container, in render order."""
        if container_id not in self._containers:
            raise KeyError(f"Unknown container: {container_id}")
        self._items[container_id].append((item_id, rect))
        self._item_container[item_id] = container_id

    @classmethod
    def from_snapshot(cls, payload: Dict[str, Any]) -> 'StaticSpatialIndex':
        """
        Build from a browser layout snapshot.

        Expected shape:
            {'containers': [{'id', 'rect', 'orientation', 'owner'}],
             'items': [{'id', 'container', 'rect'}]}
        Items are listed in DOM order. Entries that reference unknown
        containers are skipped.
        """
        index = cls()
        for entry in payload.get('containers') or []:
            container_id = entry.get('id')
            if not container_id:
                continue
            orientation = entry.get('orientation') or VERTICAL
            if orientation not in (VERTICAL, HORIZONTAL):
                orientation = VERTICAL
            index.register_container(
                container_id,
                Rect.from_dict(entry.get('rect') or {}),
                orientation=orientation,
                owner_item=entry.get('owner') or None,
            )
        for entry in payload.get('items') or []:
            container_id = entry.get('container')
            item_id = entry.get('id')
            if not item_id or container_id not in index._containers:
                logger.debug(f"Skipping snapshot item {item_id!r} in {container_id!r}")
                continue
            index.register_item(container_id, item_id, Rect.from_dict(entry.get('rect') or {}))
        return index

    def _depth(self, container_id: str) -> int:
        depth = 0
        seen = set()
        current = container_id
        while current and current not in seen:
            seen.add(current)
            owner = self._containers[current].owner_item
            if owner is None:
                break
            current = self._item_container.get(owner)
            depth += 1
        return depth

    def container_at(self, x: float, y: float) -> Optional[str]:
        hits = [cid for cid, c in self._containers.items() if c.rect.contains(x, y)]
        if not hits:
            return None
        # Deepest nesting wins; smaller box breaks ties
        return max(hits, key=lambda cid: (self._depth(cid), -self._containers[cid].rect.area))

    def container_rect(self, container_id: str) -> Optional[Rect]:
        container = self._containers.get(container_id)
        return container.rect if container else None

    def item_rects(self, container_id: str) -> List[Rect]:
        return [rect for _, rect in self._items.get(container_id, [])]

    def item_ids(self, container_id: str) -> List[str]:
        return [item_id for item_id, _ in self._items.get(container_id, [])]

    def orientation(self, container_id: str) -> str:
        container = self._containers.get(container_id)
        return container.orientation if container else VERTICAL

    def enclosing_container(self, item_id: str) -> Optional[str]:
        return self._item_container.get(item_id)

    def is_inside_item(self, container_id: str, item_id: str) -> bool:
        seen = set()
        current = container_id
        while current in self._containers and current not in seen:
            seen.add(current)
            owner = self._containers[current].owner_item
            if owner is None:
                return False
            if owner == item_id:
                return True
            current = self._item_container.get(owner)
        return False

    def has_container(self, container_id: str) -> bool:
        return container_id in self._containers
