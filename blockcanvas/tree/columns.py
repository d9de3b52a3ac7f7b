"""
Column layout adapter.

A column container (type core/columns) owns its blocks through the ordinary
`children` list. Which visual column a child is painted in is recorded in
settings["column_layout"]:

    [
      {"column_id": "col-1", "width": "50%", "block_ids": ["a", "b"]},
      {"column_id": "col-2", "width": "50%", "block_ids": ["c"]},
    ]

Columns are a presentation partition, not a tree level: a child's parent_id is
always the column container's id. Drop targets address a column with a
composite id "<container_id>:column:<index>".

Block-level functions take a container block and return a new block (or the
same object when nothing changes). Tree-level functions take the root list and
follow the mutator's "same list back on no-op" contract.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from blockcanvas.tree.mutator import (
    Block,
    InsertResult,
    Tree,
    clamp_index,
    find_block,
    find_parent_block,
    get_child_list,
    insert_block,
    move_block,
    new_block_id,
    replace_block,
)
from blockcanvas.tree.registry import COLUMNS_TYPE

logger = logging.getLogger(__name__)

SLOT_SEPARATOR = ":column:"
SLOT_ID_PATTERN = re.compile(r'^(.+?):column:(\d+)$')


@dataclass(frozen=True)
class SlotRef:
    container_id: str
    column_index: int


def parse_composite_slot_id(slot_id: Any) -> Optional[SlotRef]:
    """
    Parse "<container_id>:column:<index>".
    Anything else (including non-strings) yields None, never an exception.
    """
    if not isinstance(slot_id, str):
        return None
    match = SLOT_ID_PATTERN.match(slot_id)
    if not match:
        return None
    return SlotRef(container_id=match.group(1), column_index=int(match.group(2)))


def make_slot_id(container_id: str, column_index: int) -> str:
    return f"{container_id}{SLOT_SEPARATOR}{column_index}"


# --- Block-level helpers ---

def is_column_container(block: Optional[Block]) -> bool:
    if not block:
        return False
    settings = block.get("settings")
    return block.get("type") == COLUMNS_TYPE or (
        isinstance(settings, dict) and isinstance(settings.get("column_layout"), list)
    )


def get_column_layout(block: Block) -> List[Dict[str, Any]]:
    settings = block.get("settings")
    if not isinstance(settings, dict):
        return []
    layout = settings.get("column_layout")
    return layout if isinstance(layout, list) else []


def _copy_layout(block: Block) -> List[Dict[str, Any]]:
    return [dict(column, block_ids=list(column.get("block_ids", []))) for column in get_column_layout(block)]


def _with_layout(block: Block, layout: List[Dict[str, Any]], children: Optional[Tree] = None) -> Block:
    updated = dict(block)
    settings = dict(block.get("settings") or {})
    settings["column_layout"] = layout
    updated["settings"] = settings
    if children is not None:
        updated["children"] = children
    return updated


def slot_children(block: Block, column_index: int) -> List[Block]:
    """Children painted in the given column, in column order."""
    layout = get_column_layout(block)
    if not 0 <= column_index < len(layout):
        return []
    by_id = {child.get("id"): child for child in block.get("children") or []}
    return [by_id[bid] for bid in layout[column_index].get("block_ids", []) if bid in by_id]


def column_of(block: Block, child_id: str) -> Optional[int]:
    for i, column in enumerate(get_column_layout(block)):
        if child_id in column.get("block_ids", []):
            return i
    return None


def reorder_within_slot(block: Block, column_index: int, source_index: int, dest_index: int) -> Block:
    """
    Reorder one column. dest_index counts positions before the moved id is
    taken out, like move_block.
    """
    layout = get_column_layout(block)
    if not 0 <= column_index < len(layout):
        return block
    ids = layout[column_index].get("block_ids", [])
    if not 0 <= source_index < len(ids):
        return block
    if dest_index in (source_index, source_index + 1):
        return block

    target = dest_index - 1 if dest_index > source_index else dest_index
    next_layout = _copy_layout(block)
    column_ids = next_layout[column_index]["block_ids"]
    moved = column_ids.pop(source_index)
    column_ids.insert(clamp_index(target, len(column_ids)), moved)
    return _with_layout(block, next_layout)


def move_between_slots(
    block: Block,
    source_column: int,
    dest_column: int,
    source_index: int,
    dest_index: int,
) -> Block:
    """Move an id from one column of the container to another; parent_id is untouched."""
    if source_column == dest_column:
        return reorder_within_slot(block, source_column, source_index, dest_index)

    layout = get_column_layout(block)
    if not (0 <= source_column < len(layout) and 0 <= dest_column < len(layout)):
        logger.warning(f"Column index out of range in {block.get('id')}: {source_column} -> {dest_column}")
        return block
    if not 0 <= source_index < len(layout[source_column].get("block_ids", [])):
        return block

    next_layout = _copy_layout(block)
    moved = next_layout[source_column]["block_ids"].pop(source_index)
    dest_ids = next_layout[dest_column]["block_ids"]
    dest_ids.insert(clamp_index(dest_index, len(dest_ids)), moved)
    return _with_layout(block, next_layout)


def _assign_to_column(block: Block, child_id: str, column_index: int, index: int) -> Block:
    next_layout = _copy_layout(block)
    for column in next_layout:
        column["block_ids"] = [bid for bid in column["block_ids"] if bid != child_id]
    ids = next_layout[column_index]["block_ids"]
    ids.insert(clamp_index(index, len(ids)), child_id)
    return _with_layout(block, next_layout)


def _unassign(block: Block, child_id: str) -> Block:
    next_layout = _copy_layout(block)
    for column in next_layout:
        column["block_ids"] = [bid for bid in column["block_ids"] if bid != child_id]
    return _with_layout(block, next_layout)


def _next_column_id(layout: List[Dict[str, Any]]) -> str:
    taken = {column.get("column_id") for column in layout}
    n = len(layout) + 1
    while f"col-{n}" in taken:
        n += 1
    return f"col-{n}"


def add_column(block: Block, width: Optional[str] = None, column_id: Optional[str] = None) -> Block:
    layout = _copy_layout(block)
    layout.append({
        "column_id": column_id or _next_column_id(layout),
        "width": width or f"{round(100 / (len(layout) + 1), 2)}%",
        "block_ids": [],
    })
    return _with_layout(block, layout)


def remove_column(block: Block, column_index: int) -> Block:
    """Drop a column together with the blocks painted in it."""
    layout = _copy_layout(block)
    if not 0 <= column_index < len(layout):
        return block
    removed = set(layout.pop(column_index)["block_ids"])
    children = [child for child in block.get("children") or [] if child.get("id") not in removed]
    return _with_layout(block, layout, children=children)


def set_column_widths(block: Block, widths: List[str]) -> Block:
    layout = _copy_layout(block)
    if len(widths) != len(layout):
        logger.warning(f"Expected {len(layout)} widths for {block.get('id')}, got {len(widths)}")
        return block
    for column, width in zip(layout, widths):
        column["width"] = width
    return _with_layout(block, layout)


def normalize_column_layout(block: Block) -> Block:
    """
    Make column_layout partition the container's children: unknown and repeated
    ids are dropped, children missing from every column are appended to the
    last one. Returns the same block when the layout already partitions children.
    """
    if not is_column_container(block):
        return block

    child_ids = [child.get("id") for child in block.get("children") or []]
    known = set(child_ids)
    layout = _copy_layout(block)
    if not layout:
        if not child_ids:
            return block
        layout = [{"column_id": "col-1", "width": "100%", "block_ids": []}]

    seen = set()
    for column in layout:
        kept = []
        for bid in column["block_ids"]:
            if bid in known and bid not in seen:
                kept.append(bid)
                seen.add(bid)
        column["block_ids"] = kept
    layout[-1]["block_ids"].extend(cid for cid in child_ids if cid not in seen)

    if layout == get_column_layout(block):
        return block
    logger.debug(f"Repaired column layout of {block.get('id')}")
    return _with_layout(block, layout)


# --- Tree-level relocation ---

def _resolve_column(tree: Tree, container_id: str, column_index: int) -> Optional[Block]:
    container = find_block(tree, container_id)
    if not is_column_container(container):
        logger.warning(f"{container_id!r} is not a column container")
        return None
    if not 0 <= column_index < len(get_column_layout(container)):
        logger.warning(f"Column {column_index} does not exist in {container_id!r}")
        return None
    return container


def _child_index(container: Block, child_id: str) -> Optional[int]:
    for i, child in enumerate(container.get("children") or []):
        if child.get("id") == child_id:
            return i
    return None


def move_canvas_to_slot(
    tree: Tree,
    source_parent_id: Optional[str],
    source_index: int,
    container_id: str,
    column_index: int,
    dest_index: int,
) -> Tree:
    """
    Move a block from a plain list (root when source_parent_id is None) into a
    column. The block becomes a child of the column container.
    """
    container = _resolve_column(tree, container_id, column_index)
    if container is None:
        return tree

    siblings = get_child_list(tree, source_parent_id)
    if siblings is None or not 0 <= source_index < len(siblings):
        return tree
    moved_id = siblings[source_index].get("id")

    if source_parent_id == container_id:
        moved = tree
    else:
        moved = move_block(tree, source_parent_id, source_index, container_id, len(container.get("children") or []))
        if moved is tree:
            return tree

    return replace_block(moved, container_id, lambda block: _assign_to_column(block, moved_id, column_index, dest_index))


def move_slot_to_canvas(
    tree: Tree,
    container_id: str,
    column_index: int,
    source_index: int,
    dest_parent_id: Optional[str],
    dest_index: int,
) -> Tree:
    """Take a block out of a column and drop it into a plain list (root when dest_parent_id is None)."""
    if dest_parent_id == container_id:
        return tree
    container = _resolve_column(tree, container_id, column_index)
    if container is None:
        return tree

    ids = get_column_layout(container)[column_index].get("block_ids", [])
    if not 0 <= source_index < len(ids):
        return tree
    moved_id = ids[source_index]
    child_index = _child_index(container, moved_id)
    if child_index is None:
        logger.warning(f"Column {column_index} of {container_id!r} lists unknown block {moved_id!r}")
        return tree

    moved = move_block(tree, container_id, child_index, dest_parent_id, dest_index)
    if moved is tree:
        return tree
    return replace_block(moved, container_id, lambda block: _unassign(block, moved_id))


def move_slot_to_slot(
    tree: Tree,
    source_container_id: str,
    source_column: int,
    source_index: int,
    dest_container_id: str,
    dest_column: int,
    dest_index: int,
) -> Tree:
    """Move between two columns, in the same or in different column containers."""
    if source_container_id == dest_container_id:
        return replace_block(
            tree,
            source_container_id,
            lambda block: move_between_slots(block, source_column, dest_column, source_index, dest_index),
        )

    source = _resolve_column(tree, source_container_id, source_column)
    dest = _resolve_column(tree, dest_container_id, dest_column)
    if source is None or dest is None:
        return tree

    ids = get_column_layout(source)[source_column].get("block_ids", [])
    if not 0 <= source_index < len(ids):
        return tree
    moved_id = ids[source_index]
    child_index = _child_index(source, moved_id)
    if child_index is None:
        return tree

    moved = move_block(tree, source_container_id, child_index, dest_container_id, len(dest.get("children") or []))
    if moved is tree:
        return tree
    moved = replace_block(moved, source_container_id, lambda block: _unassign(block, moved_id))
    return replace_block(moved, dest_container_id, lambda block: _assign_to_column(block, moved_id, dest_column, dest_index))


def insert_into_slot(
    tree: Tree,
    container_id: str,
    column_index: int,
    index: int,
    block_type: str,
    registry,
    generate_id=new_block_id,
) -> InsertResult:
    """Create a block from the registry and place it in a column."""
    container = _resolve_column(tree, container_id, column_index)
    if container is None:
        return InsertResult(tree=tree)

    result = insert_block(tree, container_id, len(container.get("children") or []), block_type, registry, generate_id)
    if result.new_id is None:
        return result
    new_id = result.new_id
    return InsertResult(
        tree=replace_block(result.tree, container_id, lambda block: _assign_to_column(block, new_id, column_index, index)),
        new_id=new_id,
    )


def normalize_tree_columns(tree: Tree) -> Tree:
    """Repair every column layout in the tree; same list back when nothing needed fixing."""
    changed = False
    result = []
    for block in tree:
        next_block = block
        children = block.get("children")
        if isinstance(children, list):
            next_children = normalize_tree_columns(children)
            if next_children is not children:
                next_block = dict(block)
                next_block["children"] = next_children
        next_block = normalize_column_layout(next_block)
        if next_block is not block:
            changed = True
        result.append(next_block)
    return result if changed else tree


def place_beside(tree: Tree, anchor_id: str, block_id: str) -> Tree:
    """
    Paint block_id in the same column as anchor_id, right after it.
    Used after duplicating a block that lives in a column container.
    """
    container = find_parent_block(tree, anchor_id)
    if not is_column_container(container):
        return tree
    column_index = column_of(container, anchor_id)
    if column_index is None:
        return tree
    position = get_column_layout(container)[column_index]["block_ids"].index(anchor_id) + 1
    return replace_block(tree, container["id"],
                         lambda block: _assign_to_column(block, block_id, column_index, position))
