"""Tests for the canvas interaction state machine"""

import pytest

from plancanvas.graph import GraphStore
from plancanvas.interaction import (
    MIDDLE_BUTTON,
    RIGHT_BUTTON,
    Connecting,
    DraggingNode,
    Idle,
    InteractionStateMachine,
    Panning,
    PointerEvent,
    ResizingNode,
    Viewport,
)
from plancanvas.ir import Node, NodeKind, Position, Size


def make_store():
    return GraphStore([
        Node(id="a", kind=NodeKind.NOTE, position=Position(100, 100), size=Size(200, 100)),
        Node(id="b", kind=NodeKind.NOTE, position=Position(500, 100), size=Size(200, 100)),
    ])


def test_left_press_on_node_selects_and_drags():
    store = make_store()
    machine = InteractionStateMachine(store)

    machine.pointer_down(PointerEvent(150, 150))
    assert isinstance(machine.state, DraggingNode)
    assert machine.selected_node_id == "a"

    machine.pointer_move(PointerEvent(180, 170))
    assert store.get_node("a").position == Position(130, 120)

    machine.pointer_up()
    assert isinstance(machine.state, Idle)


def test_drag_divides_by_scale_and_clamps_at_zero():
    store = make_store()
    machine = InteractionStateMachine(store, Viewport(scale=2.0))

    machine.pointer_down(PointerEvent(250, 250, target="a"))
    machine.pointer_move(PointerEvent(150, 250))
    assert store.get_node("a").position == Position(50, 100)

    machine.pointer_move(PointerEvent(-1000, -1000))
    assert store.get_node("a").position == Position(0, 0)


def test_resize_handle_starts_resizing_and_respects_minimum():
    store = make_store()
    machine = InteractionStateMachine(store)

    # bottom-right corner of "a" is (300, 200)
    machine.pointer_down(PointerEvent(295, 195))
    assert isinstance(machine.state, ResizingNode)

    machine.pointer_move(PointerEvent(345, 215))
    assert store.get_node("a").size == Size(250, 120)

    machine.pointer_move(PointerEvent(0, 0))
    assert store.get_node("a").size == Size(80, 40)


def test_explicit_resize_flag_wins_over_hit_test():
    machine = InteractionStateMachine(make_store())

    machine.pointer_down(PointerEvent(150, 150, target="a", on_resize_handle=True))

    assert isinstance(machine.state, ResizingNode)


@pytest.mark.parametrize("event", [
    PointerEvent(150, 150, button=MIDDLE_BUTTON),
    PointerEvent(150, 150, ctrl=True),
    PointerEvent(150, 150, meta=True),
])
def test_pan_triggers(event):
    machine = InteractionStateMachine(make_store())

    machine.pointer_down(event)

    assert isinstance(machine.state, Panning)
    assert machine.selected_node_id is None


def test_space_held_turns_left_press_into_pan():
    machine = InteractionStateMachine(make_store())

    machine.key_down(" ")
    machine.pointer_down(PointerEvent(150, 150))
    assert isinstance(machine.state, Panning)

    machine.pointer_up()
    machine.key_up(" ")
    machine.pointer_down(PointerEvent(150, 150))
    assert isinstance(machine.state, DraggingNode)


def test_panning_emits_deltas_and_moves_viewport():
    store = make_store()
    machine = InteractionStateMachine(store)
    machine.pointer_down(PointerEvent(10, 10, button=MIDDLE_BUTTON))

    assert machine.pointer_move(PointerEvent(25, 5)) == (15, -5)
    assert machine.pointer_move(PointerEvent(30, 5)) == (5, 0)
    assert (machine.viewport.offset_x, machine.viewport.offset_y) == (20, -5)
    assert store.get_node("a").position == Position(100, 100)


def test_only_one_gesture_at_a_time():
    machine = InteractionStateMachine(make_store())
    machine.pointer_down(PointerEvent(150, 150))

    machine.pointer_down(PointerEvent(10, 10, button=MIDDLE_BUTTON))

    assert isinstance(machine.state, DraggingNode)
    assert not machine.start_connection("b")


def test_background_press_clears_selection():
    machine = InteractionStateMachine(make_store())
    machine.pointer_down(PointerEvent(150, 150))
    machine.pointer_up()

    machine.pointer_down(PointerEvent(5, 5))

    assert machine.selected_node_id is None
    assert isinstance(machine.state, Idle)


def test_right_button_is_ignored():
    machine = InteractionStateMachine(make_store())

    machine.pointer_down(PointerEvent(150, 150, button=RIGHT_BUTTON))

    assert isinstance(machine.state, Idle)


def test_node_removed_mid_drag_ends_gesture():
    store = make_store()
    machine = InteractionStateMachine(store)
    machine.pointer_down(PointerEvent(150, 150))

    store.remove_node("a")
    machine.pointer_move(PointerEvent(200, 200))

    assert isinstance(machine.state, Idle)
    assert "a" not in store


def test_connection_flow_commits_one_edge():
    store = make_store()
    machine = InteractionStateMachine(store)

    assert machine.start_connection("a")
    assert isinstance(machine.state, Connecting)
    # releasing the pointer does not end a connection
    machine.pointer_up()
    assert isinstance(machine.state, Connecting)

    edge = machine.end_connection("b")
    assert edge.source == "a" and edge.target == "b"
    assert isinstance(machine.state, Idle)

    machine.start_connection("a")
    assert machine.end_connection("b") is None
    assert len(store.edges) == 1


def test_connection_to_self_is_dropped():
    store = make_store()
    machine = InteractionStateMachine(store)

    machine.start_connection("a")

    assert machine.end_connection("a") is None
    assert store.edges == []
    assert isinstance(machine.state, Idle)


@pytest.mark.parametrize("cancel", [
    lambda m: m.key_down("Escape"),
    lambda m: m.canvas_click(),
    lambda m: m.cancel_connection(),
])
def test_connection_can_be_cancelled(cancel):
    store = make_store()
    machine = InteractionStateMachine(store)
    machine.start_connection("a")

    cancel(machine)

    assert isinstance(machine.state, Idle)
    assert machine.end_connection("b") is None
    assert store.edges == []


def test_delete_key_removes_selected_node_only_when_idle():
    store = make_store()
    machine = InteractionStateMachine(store)
    machine.pointer_down(PointerEvent(150, 150))

    machine.key_down("Delete")
    assert "a" in store

    machine.pointer_up()
    machine.key_down("Backspace")
    assert "a" not in store
    assert machine.selected_node_id is None


def test_wheel_zooms_within_limits_without_touching_gesture():
    machine = InteractionStateMachine(make_store())
    machine.pointer_down(PointerEvent(150, 150))

    assert machine.wheel(1) == pytest.approx(0.9)
    assert machine.wheel(-1) == pytest.approx(0.99)
    assert isinstance(machine.state, DraggingNode)

    for _ in range(100):
        machine.wheel(1)
    assert machine.viewport.scale == pytest.approx(0.1)
    for _ in range(100):
        machine.wheel(-1)
    assert machine.viewport.scale == pytest.approx(3.0)


def test_wheel_keeps_point_under_pointer():
    machine = InteractionStateMachine(make_store())
    before = machine.screen_to_canvas((400, 300))

    machine.wheel(-1, 400, 300)

    after = machine.screen_to_canvas((400, 300))
    assert after.x == pytest.approx(before.x)
    assert after.y == pytest.approx(before.y)


def test_screen_to_canvas_and_reset_view():
    machine = InteractionStateMachine(make_store(), Viewport(scale=2.0, offset_x=50, offset_y=-20))

    assert machine.screen_to_canvas((250, 180)) == Position(100, 100)

    machine.reset_view()
    assert machine.viewport == Viewport()


def test_hit_test_picks_topmost_node():
    store = GraphStore([
        Node(id="under", kind=NodeKind.NOTE, position=Position(0, 0), size=Size(200, 200)),
        Node(id="over", kind=NodeKind.NOTE, position=Position(50, 50), size=Size(100, 100)),
    ])
    machine = InteractionStateMachine(store)

    machine.pointer_down(PointerEvent(60, 60))

    assert machine.selected_node_id == "over"
