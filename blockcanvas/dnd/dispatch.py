"""
Drop dispatch - turns a DropResult into a tree mutation.

Container ids are interpreted as:
- "canvas": the root block list
- "block-library": the palette; the dragged id is a block type to create
- "<containerId>:column:<n>": a column slot, handled by the column adapter
- anything else: the id of a container block whose children list it is
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from blockcanvas.dnd.constants import CANVAS_ID, LIBRARY_ID
from blockcanvas.dnd.coordinator import DropResult
from blockcanvas.tree.columns import (
    SlotRef,
    get_column_layout,
    insert_into_slot,
    move_canvas_to_slot,
    move_slot_to_canvas,
    move_slot_to_slot,
    normalize_tree_columns,
    parse_composite_slot_id,
)
from blockcanvas.tree.mutator import (
    Tree,
    find_block,
    get_child_list,
    insert_block,
    move_block,
    new_block_id,
)

logger = logging.getLogger(__name__)


@dataclass
class DropOutcome:
    tree: Tree
    changed: bool = False
    selected_id: Optional[str] = None
    message: Optional[str] = None


class _Library:
    pass


LIBRARY = _Library()

# None means the root list
Target = Union[None, str, SlotRef, _Library]


def resolve_container(container_id: str) -> Target:
    """Map a droppable id onto the root list, a parent block id, a column slot or the library."""
    if container_id == CANVAS_ID:
        return None
    if container_id == LIBRARY_ID:
        return LIBRARY
    slot = parse_composite_slot_id(container_id)
    if slot is not None:
        return slot
    return container_id


def _source_index_in_list(tree: Tree, parent_id: Optional[str], index: int, dragged_id: str) -> Optional[int]:
    # The reported index can be stale if the list re-rendered mid-drag; trust the id
    siblings = get_child_list(tree, parent_id)
    if siblings is None:
        return None
    if 0 <= index < len(siblings) and siblings[index].get("id") == dragged_id:
        return index
    for i, block in enumerate(siblings):
        if block.get("id") == dragged_id:
            return i
    return None


def _source_index_in_slot(tree: Tree, slot: SlotRef, index: int, dragged_id: str) -> Optional[int]:
    container = find_block(tree, slot.container_id)
    if container is None:
        return None
    layout = get_column_layout(container)
    if not 0 <= slot.column_index < len(layout):
        return None
    ids = layout[slot.column_index].get("block_ids", [])
    if 0 <= index < len(ids) and ids[index] == dragged_id:
        return index
    if dragged_id in ids:
        return ids.index(dragged_id)
    return None


def apply_drop_result(tree: Tree, result: DropResult, registry, generate_id=new_block_id) -> DropOutcome:
    """
    Apply a finished drag to the tree.

    Returns the (possibly unchanged) tree plus the block to select afterwards.
    Column layouts are repaired after every committed change.
    """
    if result.destination is None:
        return DropOutcome(tree=tree, message="Drag cancelled")

    source = resolve_container(result.source.container_id)
    dest = resolve_container(result.destination.container_id)
    dest_index = result.destination.index
    dragged_id = result.dragged_id

    if dest is LIBRARY:
        return DropOutcome(tree=tree, message="Blocks cannot be dropped on the library")

    if source is LIBRARY:
        if isinstance(dest, SlotRef):
            inserted = insert_into_slot(tree, dest.container_id, dest.column_index, dest_index,
                                        dragged_id, registry, generate_id)
        else:
            inserted = insert_block(tree, dest, dest_index, dragged_id, registry, generate_id)
        if inserted.new_id is None:
            return DropOutcome(tree=tree, message=f"Could not add {dragged_id}")
        return _finish(tree, inserted.tree, selected_id=inserted.new_id)

    dest_owner = dest.container_id if isinstance(dest, SlotRef) else dest
    if dest_owner == dragged_id:
        logger.warning(f"Rejected drop of {dragged_id} into itself")
        return DropOutcome(tree=tree, message="A block cannot be dropped into itself")

    if isinstance(source, SlotRef):
        source_index = _source_index_in_slot(tree, source, result.source.index, dragged_id)
    else:
        source_index = _source_index_in_list(tree, source, result.source.index, dragged_id)
    if source_index is None:
        logger.warning(f"Dragged block {dragged_id} not found in {result.source.container_id}")
        return DropOutcome(tree=tree, message="Dragged block no longer exists")

    if isinstance(source, SlotRef) and isinstance(dest, SlotRef):
        moved = move_slot_to_slot(tree, source.container_id, source.column_index, source_index,
                                  dest.container_id, dest.column_index, dest_index)
    elif isinstance(source, SlotRef):
        moved = move_slot_to_canvas(tree, source.container_id, source.column_index, source_index,
                                    dest, dest_index)
    elif isinstance(dest, SlotRef):
        moved = move_canvas_to_slot(tree, source, source_index,
                                    dest.container_id, dest.column_index, dest_index)
    else:
        moved = move_block(tree, source, source_index, dest, dest_index)

    return _finish(tree, moved)


def _finish(before: Tree, after: Tree, selected_id: Optional[str] = None) -> DropOutcome:
    if after is before:
        return DropOutcome(tree=before)
    return DropOutcome(tree=normalize_tree_columns(after), changed=True, selected_id=selected_id)
