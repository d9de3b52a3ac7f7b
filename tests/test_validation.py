"""Tests for tree invariant validation."""

from blockcanvas.tree.validation import descendant_ids, ownership_graph, validate_tree
from conftest import columns, group, leaf


def test_valid_tree():
    tree = [
        group("A", [leaf("X", "A"), group("B", [leaf("Y", "B")], "A")]),
        columns("cols", [["a"], []], [leaf("a", "cols")]),
    ]
    report = validate_tree(tree)
    assert report['valid'], report['errors']
    assert report['errors'] == []


def test_empty_tree_is_valid():
    assert validate_tree([])['valid']


def test_duplicate_ids():
    report = validate_tree([leaf("X"), leaf("X")])
    assert not report['valid']
    assert any("Duplicate" in e for e in report['errors'])


def test_stale_parent_id():
    report = validate_tree([group("A", [leaf("X", "somewhere")])])
    assert not report['valid']
    assert any("'X'" in e for e in report['errors'])


def test_leaf_with_children_warns():
    block = leaf("X")
    block["children"] = []
    report = validate_tree([block])
    assert report['valid']
    assert report['warnings']


def test_self_containing_block():
    outer = group("A", [])
    outer["children"].append(outer)
    report = validate_tree([outer])
    assert not report['valid']


def test_column_partition_errors():
    tree = [columns("cols", [["a", "ghost"], ["a"]], [leaf("a", "cols"), leaf("b", "cols")])]
    errors = validate_tree(tree)['errors']
    assert any("more than once" in e for e in errors)
    assert any("non-children" in e for e in errors)
    assert any("not in any column" in e for e in errors)


def test_ownership_graph_and_descendants():
    tree = [group("A", [leaf("X", "A"), group("B", [leaf("Y", "B")], "A")]), leaf("Z")]
    graph = ownership_graph(tree)
    assert graph.has_edge("A", "B")
    assert graph.has_edge("B", "Y")
    assert descendant_ids(tree, "A") == {"X", "B", "Y"}
    assert descendant_ids(tree, "Z") == set()
    assert descendant_ids(tree, "missing") == set()
