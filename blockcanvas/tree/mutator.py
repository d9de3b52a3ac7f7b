"""
Block tree mutator.

Pure structural operations over a list of root blocks. A block is a plain dict:

{
  "id": "uuid",
  "kind": "block" | "container",
  "type": "core/heading",
  "parent_id": None | "uuid_of_owner",
  "content": {...}, "styles": {...}, "settings": {...},
  "children": [...]            # containers only
}

Every operation returns a new tree value and leaves the input untouched. Only the
path from the root to the changed container is copied; untouched subtrees are
shared between the old and the new value. When an operation cannot be applied
it returns the input list itself, so callers can use `is` to detect "nothing
changed".

This module exposes:
- find_block(tree, block_id) -> Optional[dict]
- find_block_path(tree, block_id) -> Optional[List[int]]
- find_parent_block(tree, child_id) -> Optional[dict]
- insert_block(tree, parent_id, index, block_type, registry) -> InsertResult
- move_block(tree, source_parent_id, source_index, dest_parent_id, dest_index) -> tree
- delete_block_deep(tree, block_id) -> DeleteResult
- duplicate_block_deep(tree, block_id, generate_id) -> DuplicateResult
- update_block_deep(tree, block_id, updates) -> UpdateResult
- set_parent_ids(tree, parent_id) -> tree
- get_child_list / replace_block: helpers shared with the column adapter
"""

from __future__ import annotations

import copy
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

Block = Dict[str, Any]
Tree = List[Block]

# Separates depth levels in paths returned by find_block_path
LEVEL_MARKER = -1

KIND_BLOCK = "block"
KIND_CONTAINER = "container"

# Owned by the tree operations; update_block_deep never writes them
STRUCTURAL_KEYS = ("id", "parent_id", "children")


@dataclass
class InsertResult:
    tree: Tree
    new_id: Optional[str] = None


@dataclass
class DeleteResult:
    found: bool
    tree: Tree


@dataclass
class DuplicateResult:
    found: bool
    tree: Tree
    duplicated_id: Optional[str] = None


@dataclass
class UpdateResult:
    found: bool
    tree: Tree


def new_block_id() -> str:
    return str(uuid.uuid4())


def is_container(block: Block) -> bool:
    return block.get("kind") == KIND_CONTAINER or isinstance(block.get("children"), list)


def _children(block: Block) -> Optional[Tree]:
    children = block.get("children")
    return children if isinstance(children, list) else None


# --- Lookup ---

def find_block(tree: Tree, block_id: str) -> Optional[Block]:
    """Depth-first search for a block by id."""
    for block in tree:
        if block.get("id") == block_id:
            return block
        children = _children(block)
        if children:
            found = find_block(children, block_id)
            if found is not None:
                return found
    return None


def find_block_path(tree: Tree, block_id: str) -> Optional[List[int]]:
    """
    Return the path from the root list to the block.

    Sibling indices of consecutive levels are separated by LEVEL_MARKER, e.g.
    [2, -1, 0] is "third root block, then its first child".
    """
    def dfs(blocks: Tree, prefix: List[int]) -> Optional[List[int]]:
        for i, block in enumerate(blocks):
            current = prefix + [i]
            if block.get("id") == block_id:
                return current
            children = _children(block)
            if children:
                found = dfs(children, current + [LEVEL_MARKER])
                if found is not None:
                    return found
        return None

    return dfs(tree, [])


def path_indices(path: List[int]) -> List[int]:
    """Strip level markers, leaving one sibling index per depth."""
    return [i for i in path if i != LEVEL_MARKER]


def find_parent_block(tree: Tree, child_id: str) -> Optional[Block]:
    """Return the container that owns child_id, or None for roots/unknown ids."""
    for block in tree:
        children = _children(block)
        if not children:
            continue
        if any(child.get("id") == child_id for child in children):
            return block
        parent = find_parent_block(children, child_id)
        if parent is not None:
            return parent
    return None


def _container_path(tree: Tree, parent_id: Optional[str]) -> Optional[List[int]]:
    """
    Index path to the container whose child list is addressed by parent_id.
    [] is the root list. None means the parent is unknown or not a container.
    """
    if parent_id is None:
        return []
    path = find_block_path(tree, parent_id)
    if path is None:
        return None
    indices = path_indices(path)
    if not is_container(_block_at(tree, indices)):
        return None
    return indices


def _block_at(tree: Tree, indices: List[int]) -> Block:
    blocks = tree
    block = None
    for i in indices:
        block = blocks[i]
        blocks = _children(block) or []
    return block


def _list_at(tree: Tree, indices: List[int]) -> Tree:
    if not indices:
        return tree
    return _children(_block_at(tree, indices)) or []


def _replace_list(tree: Tree, indices: List[int], fn: Callable[[Tree], Tree]) -> Tree:
    """Copy the path down to the container at `indices` and swap its child list for fn(copy)."""
    if not indices:
        return fn(list(tree))
    head, rest = indices[0], indices[1:]
    block = dict(tree[head])
    block["children"] = _replace_list(_children(block) or [], rest, fn)
    next_tree = list(tree)
    next_tree[head] = block
    return next_tree


def _replace_block(tree: Tree, indices: List[int], fn: Callable[[Block], Block]) -> Tree:
    """Copy the path down to the block at `indices` and swap it for fn(block)."""
    parent, last = indices[:-1], indices[-1]

    def swap(blocks: Tree) -> Tree:
        blocks[last] = fn(blocks[last])
        return blocks

    return _replace_list(tree, parent, swap)


def get_child_list(tree: Tree, parent_id: Optional[str]) -> Optional[Tree]:
    """Child list addressed by parent_id (None = root list); None if unresolvable."""
    container = _container_path(tree, parent_id)
    if container is None:
        return None
    return _list_at(tree, container)


def replace_block(tree: Tree, block_id: str, fn: Callable[[Block], Block]) -> Tree:
    """
    Swap the block with block_id for fn(block), copying only the path to it.
    Returns the input tree when the id is unknown or fn returns the block unchanged.
    """
    path = find_block_path(tree, block_id)
    if path is None:
        return tree
    indices = path_indices(path)
    current = _block_at(tree, indices)
    updated = fn(current)
    if updated is current:
        return tree
    return _replace_block(tree, indices, lambda _block: updated)


def clamp_index(index: int, length: int) -> int:
    if index < 0:
        return 0
    if index > length:
        return length
    return index


def _subtree_contains(block: Block, target_id: str) -> bool:
    if block.get("id") == target_id:
        return True
    for child in _children(block) or []:
        if _subtree_contains(child, target_id):
            return True
    return False


# --- Mutations ---

def insert_block(
    tree: Tree,
    parent_id: Optional[str],
    index: int,
    block_type: str,
    registry,
    generate_id: Callable[[], str] = new_block_id,
) -> InsertResult:
    """
    Insert a default block of `block_type` under parent_id (None = root) at index.

    The registry supplies the default instance. An unknown type, an unknown
    parent or a parent that cannot own children leaves the tree untouched and
    returns new_id=None.
    """
    new_id = generate_id()
    new_block = registry.get_default_block(block_type, new_id)
    if new_block is None:
        logger.warning(f"Unknown block type {block_type!r}; nothing inserted")
        return InsertResult(tree=tree)

    container = _container_path(tree, parent_id)
    if container is None:
        logger.warning(f"Insert target {parent_id!r} not found or not a container")
        return InsertResult(tree=tree)

    new_block["parent_id"] = parent_id
    if _children(new_block):
        new_block["children"] = set_parent_ids(new_block["children"], new_block["id"])

    def splice(blocks: Tree) -> Tree:
        blocks.insert(clamp_index(index, len(blocks)), new_block)
        return blocks

    return InsertResult(tree=_replace_list(tree, container, splice), new_id=new_block["id"])


def move_block(
    tree: Tree,
    source_parent_id: Optional[str],
    source_index: int,
    dest_parent_id: Optional[str],
    dest_index: int,
) -> Tree:
    """
    Move the block at source_index of source_parent_id to dest_index of dest_parent_id.

    dest_index is expressed against the destination list *before* the block is
    removed, the way a drop indicator reports it. Dropping on the block's own
    slot or right after it is a no-op, as is moving a block into its own subtree.
    """
    source_path = _container_path(tree, source_parent_id)
    if source_path is None:
        logger.warning(f"Move source parent {source_parent_id!r} not found")
        return tree

    source_list = _list_at(tree, source_path)
    if source_index < 0 or source_index >= len(source_list):
        logger.warning(f"Move source index {source_index} out of range for {source_parent_id!r}")
        return tree

    moved = source_list[source_index]
    same_parent = source_parent_id == dest_parent_id

    if same_parent and dest_index in (source_index, source_index + 1):
        logger.debug(f"No-op move of {moved.get('id')} inside {source_parent_id!r}")
        return tree

    if dest_parent_id is not None and _subtree_contains(moved, dest_parent_id):
        logger.warning(f"Refusing to move {moved.get('id')} into its own subtree ({dest_parent_id})")
        return tree

    def remove(blocks: Tree) -> Tree:
        del blocks[source_index]
        return blocks

    without = _replace_list(tree, source_path, remove)

    # Resolve again: removal may have shifted the destination within the same list
    dest_path = _container_path(without, dest_parent_id)
    if dest_path is None:
        logger.warning(f"Move destination {dest_parent_id!r} not found")
        return tree

    target = dest_index
    if same_parent and dest_index > source_index:
        target -= 1

    if not same_parent:
        moved = dict(moved)
        moved["parent_id"] = dest_parent_id

    def splice(blocks: Tree) -> Tree:
        blocks.insert(clamp_index(target, len(blocks)), moved)
        return blocks

    return _replace_list(without, dest_path, splice)


def delete_block_deep(tree: Tree, block_id: str) -> DeleteResult:
    """Remove a block and its whole subtree."""
    path = find_block_path(tree, block_id)
    if path is None:
        return DeleteResult(found=False, tree=tree)

    indices = path_indices(path)
    parent, last = indices[:-1], indices[-1]

    def remove(blocks: Tree) -> Tree:
        del blocks[last]
        return blocks

    return DeleteResult(found=True, tree=_replace_list(tree, parent, remove))


def _remap_ids(block: Block, generate_id: Callable[[], str], parent_id: Optional[str]) -> Block:
    """Give block and every descendant a fresh id, keeping parent_id and column layouts consistent."""
    new_id = generate_id()
    block["id"] = new_id
    block["parent_id"] = parent_id

    id_map = {}
    for child in _children(block) or []:
        old_child_id = child.get("id")
        _remap_ids(child, generate_id, new_id)
        id_map[old_child_id] = child["id"]

    settings = block.get("settings")
    if isinstance(settings, dict) and isinstance(settings.get("column_layout"), list):
        for column in settings["column_layout"]:
            column["block_ids"] = [id_map.get(bid, bid) for bid in column.get("block_ids", [])]
    return block


def duplicate_block_deep(
    tree: Tree,
    block_id: str,
    generate_id: Callable[[], str] = new_block_id,
) -> DuplicateResult:
    """
    Deep-copy a block (with its subtree) and place the copy right after the original.
    Every node of the copy gets a new id.
    """
    path = find_block_path(tree, block_id)
    if path is None:
        return DuplicateResult(found=False, tree=tree)

    indices = path_indices(path)
    parent, last = indices[:-1], indices[-1]
    original = _block_at(tree, indices)
    clone = _remap_ids(copy.deepcopy(original), generate_id, original.get("parent_id"))

    def splice(blocks: Tree) -> Tree:
        blocks.insert(last + 1, clone)
        return blocks

    return DuplicateResult(
        found=True,
        tree=_replace_list(tree, parent, splice),
        duplicated_id=clone["id"],
    )


def deep_merge(target: Dict[str, Any], source: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge source into a copy of target.

    Nested dicts are merged key by key; lists and scalars from source replace
    the target value.
    """
    result = dict(target)
    for key, value in source.items():
        current = result.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


def update_block_deep(tree: Tree, block_id: str, updates: Dict[str, Any]) -> UpdateResult:
    """
    Deep-merge `updates` into the block with block_id.

    Keys in STRUCTURAL_KEYS are dropped; identity and nesting only change
    through insert, move, delete and duplicate.
    """
    path = find_block_path(tree, block_id)
    if path is None:
        return UpdateResult(found=False, tree=tree)

    ignored = [key for key in STRUCTURAL_KEYS if key in updates]
    if ignored:
        logger.warning(f"Ignoring structural keys {ignored} in update of {block_id}")
        updates = {key: value for key, value in updates.items() if key not in STRUCTURAL_KEYS}
    if not updates:
        return UpdateResult(found=True, tree=tree)

    next_tree = _replace_block(tree, path_indices(path), lambda block: deep_merge(block, updates))
    return UpdateResult(found=True, tree=next_tree)


def set_parent_ids(tree: Tree, parent_id: Optional[str] = None) -> Tree:
    """
    Rewrite parent_id on every block to match the actual nesting.
    Returns the input list when every back reference is already correct.
    """
    changed = False
    result = []
    for block in tree:
        next_block = block
        if block.get("parent_id") != parent_id or "parent_id" not in block:
            next_block = dict(block)
            next_block["parent_id"] = parent_id
        children = _children(block)
        if children is not None:
            next_children = set_parent_ids(children, block.get("id"))
            if next_children is not children:
                if next_block is block:
                    next_block = dict(block)
                next_block["children"] = next_children
        if next_block is not block:
            changed = True
        result.append(next_block)
    return result if changed else tree


def iter_blocks(tree: Tree):
    """Yield every block in depth-first order."""
    for block in tree:
        yield block
        children = _children(block)
        if children:
            yield from iter_blocks(children)
