"""
Shared constants for the drag and drop system.

These values are used by both Python (coordinator, dispatch)
and JavaScript (overlay). Keep them in sync!
"""

# Droppable id of the top-level block list
CANVAS_ID = "canvas"

# Droppable id of the block palette; items dragged from it are block types
LIBRARY_ID = "block-library"

# Container axis along which items are stacked
VERTICAL = "vertical"
HORIZONTAL = "horizontal"

# Height in pixels of the gap shown between items while hovering
INDICATOR_SLOT_HEIGHT = 12

# Minimum seconds between dragover events forwarded to the server
HOVER_THROTTLE = 0.05

# DOM attributes read by the layout snapshot
DROPPABLE_ATTR = "data-droppable-id"
DRAGGABLE_ATTR = "data-draggable-id"
ORIENTATION_ATTR = "data-orientation"
