"""
Drop Indicator Overlay - thin HTML layer showing where a drop will land.

The overlay is a single fixed-position bar. Python decides where it goes from
the coordinator's DragState and the current spatial index, so the browser
only moves one div. The same script block also installs
window.blockCanvasSnapshot(), which measures every drop container and
draggable item for StaticSpatialIndex.from_snapshot.
"""

from nicegui import ui

from blockcanvas.dnd.constants import (
    DRAGGABLE_ATTR,
    DROPPABLE_ATTR,
    HORIZONTAL,
    INDICATOR_SLOT_HEIGHT,
    ORIENTATION_ATTR,
)
from blockcanvas.dnd.coordinator import DragState
from blockcanvas.dnd.geometry import indicator_position
from blockcanvas.dnd.spatial import SpatialIndex


class DropIndicatorOverlay:
    """Renders the insertion indicator for the current drag."""

    def __init__(self, color: str = '#3b82f6'):
        """Initialize overlay - call setup() once per page."""
        self._indicator_id = 'drop-indicator'
        self._color = color
        self._is_setup = False
        self._thickness = max(2, INDICATOR_SLOT_HEIGHT // 4)
        self._visible = False

    def setup(self):
        """Inject the indicator element and the layout snapshot helper."""
        if self._is_setup:
            return

        thickness = self._thickness
        ui.add_body_html(f'''
            <div id="{self._indicator_id}" style="
                position: fixed;
                left: 0; top: 0;
                width: 0; height: {thickness}px;
                background: {self._color};
                border-radius: {thickness}px;
                box-shadow: 0 0 6px {self._color};
                pointer-events: none;
                opacity: 0;
                z-index: 200;
                transition: opacity 0.1s;
            "></div>

            <script>
                window.blockCanvasSnapshot = function() {{
                    const rectOf = (el) => {{
                        const r = el.getBoundingClientRect();
                        return {{left: r.left, top: r.top, width: r.width, height: r.height}};
                    }};
                    const containers = [];
                    const items = [];
                    document.querySelectorAll('[{DROPPABLE_ATTR}]').forEach((el) => {{
                        const owner = el.closest('[{DRAGGABLE_ATTR}]');
                        containers.push({{
                            id: el.getAttribute('{DROPPABLE_ATTR}'),
                            rect: rectOf(el),
                            orientation: el.getAttribute('{ORIENTATION_ATTR}') || 'vertical',
                            owner: owner ? owner.getAttribute('{DRAGGABLE_ATTR}') : null
                        }});
                    }});
                    document.querySelectorAll('[{DRAGGABLE_ATTR}]').forEach((el) => {{
                        const container = el.parentElement ? el.parentElement.closest('[{DROPPABLE_ATTR}]') : null;
                        if (!container) return;
                        items.push({{
                            id: el.getAttribute('{DRAGGABLE_ATTR}'),
                            container: container.getAttribute('{DROPPABLE_ATTR}'),
                            rect: rectOf(el)
                        }});
                    }});
                    return {{containers: containers, items: items}};
                }};
            </script>
        ''')
        self._is_setup = True

    def update(self, state: DragState, spatial_index: SpatialIndex):
        """Move the indicator to the hovered insertion point, or hide it."""
        if not state.is_dragging or not state.indicator_visible or state.over is None:
            self.hide()
            return

        container_id = state.over.container_id
        orientation = spatial_index.orientation(container_id)
        position = indicator_position(
            spatial_index.container_rect(container_id),
            spatial_index.item_rects(container_id),
            state.over.index,
            orientation,
        )
        if position is None:
            self.hide()
            return

        x, y, length = position
        if orientation == HORIZONTAL:
            size = f"el.style.width = '{self._thickness}px'; el.style.height = '{length}px';"
        else:
            size = f"el.style.width = '{length}px'; el.style.height = '{self._thickness}px';"

        ui.run_javascript(f'''
            (function() {{
                const el = document.getElementById('{self._indicator_id}');
                if (!el) return;
                el.style.left = '{x}px';
                el.style.top = '{y}px';
                {size}
                el.style.opacity = '1';
            }})();
        ''')
        self._visible = True

    def hide(self):
        if not self._visible:
            return
        ui.run_javascript(f'''
            (function() {{
                const el = document.getElementById('{self._indicator_id}');
                if (el) el.style.opacity = '0';
            }})();
        ''')
        self._visible = False
