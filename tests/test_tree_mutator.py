"""
Tests for the pure block tree operations.

Every mutation must leave its input untouched and hand back the very same list
when nothing changes.
"""

import copy

import pytest

from blockcanvas.tree.mutator import (
    LEVEL_MARKER,
    deep_merge,
    delete_block_deep,
    duplicate_block_deep,
    find_block,
    find_block_path,
    find_parent_block,
    insert_block,
    iter_blocks,
    move_block,
    set_parent_ids,
    update_block_deep,
)
from conftest import columns, group, ids_of, leaf


@pytest.fixture
def tree():
    """Root: [A(group: X, Y, Z), B, C]"""
    return [
        group("A", [leaf("X", "A"), leaf("Y", "A"), leaf("Z", "A")]),
        leaf("B"),
        leaf("C"),
    ]


class TestLookup:

    def test_find_block_nested(self, tree):
        assert find_block(tree, "Y")["id"] == "Y"
        assert find_block(tree, "missing") is None

    def test_find_block_path_uses_level_marker(self, tree):
        assert find_block_path(tree, "B") == [1]
        assert find_block_path(tree, "Z") == [0, LEVEL_MARKER, 2]
        assert find_block_path(tree, "missing") is None

    def test_find_parent_block(self, tree):
        assert find_parent_block(tree, "X")["id"] == "A"
        assert find_parent_block(tree, "B") is None

    def test_iter_blocks_depth_first(self, tree):
        assert [b["id"] for b in iter_blocks(tree)] == ["A", "X", "Y", "Z", "B", "C"]


class TestMove:

    def test_move_to_end_of_group(self, tree):
        result = move_block(tree, "A", 0, "A", 3)
        assert ids_of(result[0]["children"]) == ["Y", "Z", "X"]

    def test_same_slot_is_noop(self, tree):
        assert move_block(tree, "A", 1, "A", 1) is tree

    def test_adjacent_slot_is_noop(self, tree):
        assert move_block(tree, "A", 1, "A", 2) is tree
        assert move_block(tree, None, 1, None, 2) is tree

    def test_negative_index_clamps_to_start(self, tree):
        assert move_block(tree, "A", 2, "A", -5) == move_block(tree, "A", 2, "A", 0)
        assert ids_of(move_block(tree, "A", 2, "A", -5)[0]["children"]) == ["Z", "X", "Y"]

    def test_large_index_appends(self, tree):
        result = move_block(tree, "A", 0, "A", 999)
        assert ids_of(result[0]["children"]) == ["Y", "Z", "X"]

    def test_move_up_within_root(self, tree):
        result = move_block(tree, None, 2, None, 0)
        assert ids_of(result) == ["C", "A", "B"]

    def test_cross_container_reparents(self, tree):
        result = move_block(tree, None, 1, "A", 1)
        assert ids_of(result) == ["A", "C"]
        assert ids_of(result[0]["children"]) == ["X", "B", "Y", "Z"]
        assert find_block(result, "B")["parent_id"] == "A"

    def test_move_out_to_root_clears_parent(self, tree):
        result = move_block(tree, "A", 0, None, 3)
        assert ids_of(result) == ["A", "B", "C", "X"]
        assert find_block(result, "X")["parent_id"] is None

    def test_input_is_not_mutated(self, tree):
        before = copy.deepcopy(tree)
        move_block(tree, "A", 0, None, 0)
        assert tree == before

    def test_untouched_subtrees_are_shared(self, tree):
        result = move_block(tree, None, 2, None, 1)
        assert result[0] is tree[0]

    def test_move_into_own_subtree_is_rejected(self):
        tree = [group("outer", [group("inner", [], "outer")])]
        assert move_block(tree, None, 0, "inner", 0) is tree
        assert move_block(tree, None, 0, "outer", 0) is tree

    def test_unknown_source_parent(self, tree):
        assert move_block(tree, "nope", 0, None, 0) is tree

    def test_source_index_out_of_range(self, tree):
        assert move_block(tree, "A", 5, None, 0) is tree

    def test_destination_must_be_container(self, tree):
        assert move_block(tree, "A", 0, "B", 0) is tree


class TestInsert:

    def test_insert_into_empty_tree(self, registry):
        result = insert_block([], None, 0, "core/paragraph", registry)
        assert len(result.tree) == 1
        assert result.new_id == result.tree[0]["id"]
        assert result.tree[0]["parent_id"] is None

    def test_insert_into_group_clamps_index(self, tree, registry, id_gen):
        result = insert_block(tree, "A", 99, "core/heading", registry, id_gen)
        assert result.new_id == "new-1"
        assert ids_of(result.tree[0]["children"]) == ["X", "Y", "Z", "new-1"]
        assert find_block(result.tree, "new-1")["parent_id"] == "A"

    def test_insert_container_gets_children_list(self, registry, id_gen):
        result = insert_block([], None, 0, "core/group", registry, id_gen)
        assert result.tree[0]["children"] == []
        assert result.tree[0]["kind"] == "container"

    def test_unknown_type_is_noop(self, tree, registry):
        result = insert_block(tree, None, 0, "acme/unknown", registry)
        assert result.tree is tree
        assert result.new_id is None

    def test_unknown_parent_is_noop(self, tree, registry):
        result = insert_block(tree, "missing", 0, "core/paragraph", registry)
        assert result.tree is tree
        assert result.new_id is None

    def test_leaf_parent_is_noop(self, tree, registry):
        result = insert_block(tree, "B", 0, "core/paragraph", registry)
        assert result.tree is tree


class TestDelete:

    def test_delete_cascades(self, tree):
        result = delete_block_deep(tree, "A")
        assert result.found
        assert ids_of(result.tree) == ["B", "C"]
        assert find_block(result.tree, "X") is None

    def test_delete_nested(self, tree):
        result = delete_block_deep(tree, "Y")
        assert ids_of(result.tree[0]["children"]) == ["X", "Z"]

    def test_delete_unknown(self, tree):
        result = delete_block_deep(tree, "missing")
        assert not result.found
        assert result.tree is tree


class TestDuplicate:

    def test_duplicate_group_with_child(self, id_gen):
        tree = [group("group1", [leaf("child1", "group1")])]
        result = duplicate_block_deep(tree, "group1", id_gen)

        assert result.found
        assert len(result.tree) == 2
        assert result.tree[0]["id"] == "group1"
        assert result.tree[0]["children"][0]["id"] == "child1"

        clone = result.tree[1]
        assert clone["id"] == result.duplicated_id
        assert clone["id"] != "group1"
        assert clone["children"][0]["id"] != "child1"
        assert clone["children"][0]["parent_id"] == clone["id"]

    def test_ids_unique_after_duplicate(self, tree):
        result = duplicate_block_deep(tree, "A")
        all_ids = [b["id"] for b in iter_blocks(result.tree)]
        assert len(all_ids) == len(set(all_ids)) == 10

    def test_nested_duplicate_keeps_parent(self, tree, id_gen):
        result = duplicate_block_deep(tree, "Y", id_gen)
        assert ids_of(result.tree[0]["children"]) == ["X", "Y", "new-1", "Z"]
        assert find_block(result.tree, "new-1")["parent_id"] == "A"

    def test_column_layout_is_remapped(self, id_gen):
        tree = [columns("cols", [["a"], ["b"]], [leaf("a", "cols"), leaf("b", "cols")])]
        result = duplicate_block_deep(tree, "cols", id_gen)
        clone = result.tree[1]
        clone_layout = clone["settings"]["column_layout"]
        assert [c["block_ids"] for c in clone_layout] == [[clone["children"][0]["id"]], [clone["children"][1]["id"]]]
        assert tree[0]["settings"]["column_layout"][0]["block_ids"] == ["a"]

    def test_duplicate_unknown(self, tree):
        result = duplicate_block_deep(tree, "missing")
        assert not result.found
        assert result.tree is tree


class TestUpdate:

    def test_deep_merge(self):
        merged = deep_merge({"a": {"x": 1, "y": 2}, "l": [1]}, {"a": {"y": 3}, "l": [2]})
        assert merged == {"a": {"x": 1, "y": 3}, "l": [2]}

    def test_update_merges_nested(self, tree):
        result = update_block_deep(tree, "B", {"content": {"value": "hello"}, "styles": {"padding": "4px"}})
        block = find_block(result.tree, "B")
        assert result.found
        assert block["content"] == {"kind": "text", "value": "hello"}
        assert block["styles"]["padding"] == "4px"
        assert find_block(tree, "B")["content"]["value"] == ""

    def test_update_ignores_structural_keys(self, tree):
        result = update_block_deep(tree, "B", {"id": "A", "parent_id": None, "children": []})
        assert result.found
        assert result.tree is tree

    def test_update_keeps_id_while_merging_content(self, tree):
        result = update_block_deep(tree, "B", {"id": "A", "content": {"value": "x"}})
        block = find_block(result.tree, "B")
        assert block["content"]["value"] == "x"
        assert [b["id"] for b in iter_blocks(result.tree)].count("A") == 1

    def test_update_unknown(self, tree):
        result = update_block_deep(tree, "missing", {"content": {}})
        assert not result.found
        assert result.tree is tree


class TestSetParentIds:

    def test_restamps_stale_references(self):
        tree = [group("A", [leaf("X", "wrong")], parent_id="stale")]
        result = set_parent_ids(tree)
        assert result[0]["parent_id"] is None
        assert result[0]["children"][0]["parent_id"] == "A"

    def test_consistent_tree_returned_as_is(self, tree):
        assert set_parent_ids(tree) is tree
