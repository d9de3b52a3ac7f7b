"""
Block tree package.

- mutator: pure tree operations (find, insert, move, delete, duplicate, update)
- columns: column layout adapter and composite slot ids
- registry: block type definitions and default blocks
- validation: invariant checks on a NetworkX ownership graph
- history: undo/redo snapshots

Usage:
    from blockcanvas.tree import BlockTypeRegistry, insert_block, move_block
"""

from blockcanvas.tree.mutator import (
    LEVEL_MARKER,
    InsertResult,
    DeleteResult,
    DuplicateResult,
    UpdateResult,
    new_block_id,
    is_container,
    find_block,
    find_block_path,
    find_parent_block,
    path_indices,
    insert_block,
    move_block,
    delete_block_deep,
    duplicate_block_deep,
    update_block_deep,
    deep_merge,
    set_parent_ids,
    iter_blocks,
)
from blockcanvas.tree.registry import BlockTypeRegistry, BlockTypeError, COLUMNS_TYPE
from blockcanvas.tree.columns import (
    SlotRef,
    parse_composite_slot_id,
    make_slot_id,
    is_column_container,
    slot_children,
    reorder_within_slot,
    move_between_slots,
    move_canvas_to_slot,
    move_slot_to_canvas,
    move_slot_to_slot,
    insert_into_slot,
    normalize_column_layout,
    normalize_tree_columns,
    place_beside,
)
from blockcanvas.tree.validation import validate_tree, descendant_ids
from blockcanvas.tree.history import EditHistory

__all__ = [
    'LEVEL_MARKER',
    'InsertResult',
    'DeleteResult',
    'DuplicateResult',
    'UpdateResult',
    'new_block_id',
    'is_container',
    'find_block',
    'find_block_path',
    'find_parent_block',
    'path_indices',
    'insert_block',
    'move_block',
    'delete_block_deep',
    'duplicate_block_deep',
    'update_block_deep',
    'deep_merge',
    'set_parent_ids',
    'iter_blocks',
    'BlockTypeRegistry',
    'BlockTypeError',
    'COLUMNS_TYPE',
    'SlotRef',
    'parse_composite_slot_id',
    'make_slot_id',
    'is_column_container',
    'slot_children',
    'reorder_within_slot',
    'move_between_slots',
    'move_canvas_to_slot',
    'move_slot_to_canvas',
    'move_slot_to_slot',
    'insert_into_slot',
    'normalize_column_layout',
    'normalize_tree_columns',
    'place_beside',
    'validate_tree',
    'descendant_ids',
    'EditHistory',
]
