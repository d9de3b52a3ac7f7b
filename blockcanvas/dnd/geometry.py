"""
Pointer geometry for drop containers.

Pure functions over item bounding boxes; no DOM access.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from blockcanvas.dnd.constants import HORIZONTAL, VERTICAL


@dataclass(frozen=True)
class Rect:
    """Axis-aligned bounding box in viewport pixels."""
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2

    @property
    def center_y(self) -> float:
        return self.top + self.height / 2

    @property
    def area(self) -> float:
        return self.width * self.height

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Rect':
        """Build from a DOMRect-like dict (left/top/width/height, or x/y)."""
        left = data.get('left', data.get('x', 0))
        top = data.get('top', data.get('y', 0))
        return cls(float(left), float(top), float(data.get('width', 0)), float(data.get('height', 0)))


def compute_index_from_pointer(rects: Sequence[Rect], x: float, y: float,
                               orientation: str = VERTICAL) -> int:
    """
    Insertion index for a pointer over a container.

    Returns the index of the first item whose midpoint on the container's axis
    lies past the pointer, or len(rects) when the pointer is past them all.
    """
    for index, rect in enumerate(rects):
        if orientation == HORIZONTAL:
            if x < rect.center_x:
                return index
        elif y < rect.center_y:
            return index
    return len(rects)


def indicator_position(container: Optional[Rect], rects: Sequence[Rect], index: int,
                       orientation: str = VERTICAL) -> Optional[Tuple[float, float, float]]:
    """
    Where to draw the insertion line for index.

    Returns (x, y, length): the line starts at (x, y) and runs across the
    container for length pixels. None when there is nothing to anchor to.
    """
    if not rects:
        if container is None:
            return None
        if orientation == HORIZONTAL:
            return container.left, container.top, container.height
        return container.left, container.top, container.width

    index = max(0, min(index, len(rects)))
    if orientation == HORIZONTAL:
        if index == len(rects):
            pos = rects[-1].right
        elif index == 0:
            pos = rects[0].left
        else:
            pos = (rects[index - 1].right + rects[index].left) / 2
        top = container.top if container else min(r.top for r in rects)
        length = container.height if container else max(r.bottom for r in rects) - top
        return pos, top, length

    if index == len(rects):
        pos = rects[-1].bottom
    elif index == 0:
        pos = rects[0].top
    else:
        pos = (rects[index - 1].bottom + rects[index].top) / 2
    left = container.left if container else min(r.left for r in rects)
    length = container.width if container else max(r.right for r in rects) - left
    return left, pos, length
