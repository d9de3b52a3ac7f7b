"""
Structural checks for block trees.

Builds a NetworkX ownership graph (container -> child) from the nested lists and
reports anything that breaks the tree invariants:
- duplicate ids
- parent_id back references that do not match the nesting
- ownership cycles (the same block object reachable from its own subtree)
- column layouts that do not partition the container's children
"""

from typing import Any, Dict, List, Set

import networkx as nx

from blockcanvas.tree.columns import get_column_layout, is_column_container
from blockcanvas.tree.mutator import Tree

ROOT = "__root__"


def ownership_graph(tree: Tree) -> nx.DiGraph:
    """
    Directed graph with an edge from each container to each child it owns.
    Root blocks hang off the synthetic ROOT node.
    """
    G = nx.DiGraph()
    G.add_node(ROOT)
    visiting: Set[int] = set()

    def walk(blocks: Tree, owner: str):
        for block in blocks:
            block_id = block.get("id")
            G.add_node(block_id, type=block.get("type"))
            G.add_edge(owner, block_id)
            children = block.get("children")
            if not isinstance(children, list):
                continue
            # Guard against a block dict that contains itself
            if id(block) in visiting:
                continue
            visiting.add(id(block))
            walk(children, block_id)
            visiting.discard(id(block))

    walk(tree, ROOT)
    return G


def descendant_ids(tree: Tree, block_id: str) -> Set[str]:
    """Ids of every block owned (directly or not) by block_id."""
    G = ownership_graph(tree)
    if block_id not in G:
        return set()
    return set(nx.descendants(G, block_id))


def validate_tree(tree: Tree) -> Dict[str, Any]:
    """
    Check the tree invariants.

    Returns dict with:
      - valid: bool
      - errors: list of invariant violations
      - warnings: list of non-fatal findings
    """
    result: Dict[str, Any] = {'valid': True, 'errors': [], 'warnings': []}
    seen: Set[str] = set()

    def error(message: str):
        result['errors'].append(message)
        result['valid'] = False

    def walk(blocks: Tree, parent_id, stack: Set[int]):
        for block in blocks:
            block_id = block.get("id")
            if not isinstance(block_id, str) or not block_id:
                error(f"Block without a valid id under {parent_id!r}")
            elif block_id in seen:
                error(f"Duplicate id '{block_id}'")
            else:
                seen.add(block_id)

            if block.get("parent_id") != parent_id:
                error(f"Block '{block_id}' has parent_id {block.get('parent_id')!r}, expected {parent_id!r}")

            children = block.get("children")
            if children is not None and block.get("kind") == "block":
                result['warnings'].append(f"Leaf block '{block_id}' carries a children list")
            if not isinstance(children, list):
                continue
            if id(block) in stack:
                error(f"Block '{block_id}' contains itself")
                continue

            if is_column_container(block):
                _check_columns(block, error)

            walk(children, block_id, stack | {id(block)})

    walk(tree, None, set())

    if not nx.is_directed_acyclic_graph(ownership_graph(tree)):
        error("Ownership graph contains a cycle")

    return result


def _check_columns(block: Dict[str, Any], error) -> None:
    block_id = block.get("id")
    child_ids = [child.get("id") for child in block.get("children") or []]
    assigned: List[str] = []
    for column in get_column_layout(block):
        assigned.extend(column.get("block_ids", []))

    duplicates = sorted({bid for bid in assigned if assigned.count(bid) > 1})
    unknown = sorted(set(assigned) - set(child_ids))
    missing = [cid for cid in child_ids if cid not in set(assigned)]

    if duplicates:
        error(f"Columns of '{block_id}' list {', '.join(duplicates)} more than once")
    if unknown:
        error(f"Columns of '{block_id}' reference non-children {', '.join(unknown)}")
    if missing:
        error(f"Children {', '.join(missing)} of '{block_id}' are not in any column")
