"""Tests for the graph validator and the rule-based graph fixer"""

import pytest

from plancanvas.ir import Edge, Node, NodeKind, Position, Size
from plancanvas.validation import (
    GraphFixer,
    GraphValidator,
    ValidationSeverity,
    raise_on_errors,
    validate_graph,
)


def make_node(id: str, x: float = 0, y: float = 0, adjacency=()) -> Node:
    return Node(
        id=id,
        kind=NodeKind.NOTE,
        position=Position(x, y),
        size=Size(100, 60),
        adjacency=frozenset(adjacency),
    )


def broken_graph():
    nodes = [
        make_node("a", 0, 0, {"b"}),
        make_node("b", 200, 0, {"a"}),
        make_node("b", 400, 0),            # duplicate id
        make_node("lonely", 600, 0),
        make_node("stacked", 650, 20),     # overlaps "lonely"
    ]
    edges = [
        Edge.between("a", "b"),
        Edge.between("a", "b"),            # duplicate
        Edge.between("a", "ghost"),        # missing target
        Edge.between("b", "b"),            # self loop
    ]
    return nodes, edges


def test_validator_reports_every_problem():
    nodes, edges = broken_graph()
    result = GraphValidator().validate(nodes, edges)

    assert not result.is_valid
    assert {
        "DUPLICATE_NODE_ID",
        "MISSING_TARGET_NODE",
        "SELF_LOOP",
        "DUPLICATE_EDGE",
        "ORPHANED_NODE",
        "OVERLAPPING_NODES",
    } <= result.codes()
    assert result.stats["nodes"] == 5
    assert result.stats["user_nodes"] == 5
    assert "Invalid" in result.get_summary()


def test_clean_graph_is_valid():
    nodes = [make_node("a", 0, 0, {"b"}), make_node("b", 200, 0, {"a"})]
    result = validate_graph(nodes, [Edge.between("a", "b")])

    assert result.is_valid
    assert result.issues == []
    assert result.to_dict()["error_count"] == 0


def test_adjacency_mismatch_is_a_warning():
    nodes = [make_node("a", 0, 0), make_node("b", 200, 0)]
    edges = [Edge.between("a", "b")]

    relaxed = validate_graph(nodes, edges)
    strict = validate_graph(nodes, edges, strict=True)

    assert relaxed.is_valid
    assert relaxed.warning_count == 2
    assert not strict.is_valid


def test_overlap_check_can_be_disabled():
    nodes = [make_node("a", 0, 0), make_node("b", 10, 10)]
    result = GraphValidator(check_overlaps=False).validate(nodes, [])

    assert "OVERLAPPING_NODES" not in result.codes()


def test_raise_on_errors_is_opt_in():
    nodes, edges = broken_graph()
    result = validate_graph(nodes, edges)

    with pytest.raises(ValueError, match="DUPLICATE_NODE_ID"):
        raise_on_errors(result)
    raise_on_errors(validate_graph([make_node("a")], []))


def test_fixer_repairs_everything_it_can():
    nodes, edges = broken_graph()
    fixed_nodes, fixed_edges, fix = GraphFixer().fix(nodes, edges)

    assert [n.id for n in fixed_nodes] == ["a", "b", "lonely", "stacked"]
    assert [e.id for e in fixed_edges] == ["edge:a->b"]
    assert fix.changed
    assert set(fix.issues_fixed) <= GraphFixer.AUTO_FIXABLE

    after = GraphValidator(check_overlaps=False).validate(fixed_nodes, fixed_edges)
    assert after.is_valid
    assert not [i for i in after.issues if i.severity != ValidationSeverity.INFO]


def test_fixer_keeps_correct_nodes_as_is():
    a = make_node("a", 0, 0, {"b"})
    b = make_node("b", 200, 0, {"a"})
    fixed_nodes, _, fix = GraphFixer().fix([a, b], [Edge.between("a", "b")])

    assert fixed_nodes[0] is a
    assert fixed_nodes[1] is b
    assert not fix.changed
