"""Tests for zone anchors and the collision-aware placement resolver"""

from plancanvas.ir import Node, NodeKind, Position, Provenance, Size
from plancanvas.placement import (
    MIN_SPACING,
    default_anchor,
    default_size,
    find_overlaps,
    grid_anchor,
    node_rect,
    rects_overlap,
    resolve,
)


def make_node(id: str, x: float, y: float, w: float = 100, h: float = 100) -> Node:
    return Node(
        id=id,
        kind=NodeKind.NOTE,
        position=Position(x, y),
        size=Size(w, h),
        provenance=Provenance(owner="user", generated=False),
    )


def test_free_anchor_is_returned_unchanged():
    anchor = Position(0, 0)
    nodes = [make_node("far", 1000, 1000)]

    assert resolve(nodes, Size(100, 100), anchor=anchor) == anchor


def test_free_anchor_near_a_node_is_not_moved():
    nodes = [make_node("a", 0, 0, 50, 50)]
    anchor = Position(60, 0)

    # inside the spacing margin but not overlapping
    assert resolve(nodes, Size(50, 50), anchor=anchor) == anchor


def test_occupied_anchor_moves_to_nearest_free_cell():
    nodes = [make_node("a", 0, 0)]
    result = resolve(nodes, Size(100, 100), anchor=Position(0, 0))

    # First probe of the innermost ring is one cell to the right
    assert result == Position(100 + MIN_SPACING, 0)
    assert not find_overlaps(nodes, result, Size(100, 100), MIN_SPACING)


def test_resolved_position_keeps_spacing_clear():
    nodes = [make_node("a", 0, 0), make_node("b", 130, 0), make_node("c", 0, 130)]
    size = Size(100, 100)
    result = resolve(nodes, size, anchor=Position(0, 0))

    for node in nodes:
        assert not rects_overlap(
            node_rect(make_node("probe", result.x, result.y)), node_rect(node), MIN_SPACING
        )


def test_resolution_is_deterministic():
    nodes = [make_node(f"n{i}", i * 40, 0) for i in range(6)]
    first = resolve(nodes, Size(120, 80), anchor=Position(0, 0))
    second = resolve(list(reversed(nodes)), Size(120, 80), anchor=Position(0, 0))

    assert first == second


def test_exhausted_search_falls_back_to_anchor():
    blocker = make_node("huge", -5000, -5000, 20000, 20000)
    anchor = Position(10, 10)

    assert resolve([blocker], Size(100, 100), anchor=anchor, max_rings=2) == anchor


def test_probes_outside_bounds_are_skipped():
    nodes = [make_node("a", 0, 0)]
    result = resolve(nodes, Size(100, 100), anchor=Position(0, 0), bounds=(0, 1000))

    assert result.x >= 0 and result.y >= 0


def test_default_anchor_follows_kind_zone():
    assert default_anchor(NodeKind.APP_NAME) == Position(400, 50)
    assert resolve([], default_size(NodeKind.SCREEN), NodeKind.SCREEN) == default_anchor(NodeKind.SCREEN)


def test_grid_anchor_wraps_by_zone_columns():
    first = grid_anchor(NodeKind.USER_PERSONA, 0)
    second = grid_anchor(NodeKind.USER_PERSONA, 1)
    sixth = grid_anchor(NodeKind.USER_PERSONA, 5)
    size = default_size(NodeKind.USER_PERSONA)

    assert second == Position(first.x + size.width + MIN_SPACING, first.y)
    assert sixth == Position(first.x, first.y + size.height + MIN_SPACING)


def test_touching_rectangles_do_not_overlap_without_padding():
    a = node_rect(make_node("a", 0, 0))
    b = node_rect(make_node("b", 100, 0))

    assert not rects_overlap(a, b)
    assert rects_overlap(a, b, padding=1)
