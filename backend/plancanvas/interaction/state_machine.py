"""
Interaction State Machine - turns raw pointer, key and wheel events into
exactly one active gesture and commits its effect through the Graph Store.

    Idle -> Panning        middle button, ctrl/meta + left, or left while space is held
    Idle -> DraggingNode   left button on a node
    Idle -> ResizingNode   left button on a node's resize handle
    Idle -> Connecting     start_connection(node)
    *    -> Idle           pointer up (Connecting ends on end_connection / Escape / canvas click)

Zoom is independent of the gesture state.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from plancanvas.graph import GraphStore
from plancanvas.ir import Edge, EdgeKind, Position, Size
from plancanvas.interaction.events import (
    LEFT_BUTTON,
    MIDDLE_BUTTON,
    PointerEvent,
    Viewport,
)

logger = logging.getLogger(__name__)

MIN_SCALE = 0.1
MAX_SCALE = 3.0
ZOOM_OUT = 0.9
ZOOM_IN = 1.1
MIN_NODE_WIDTH = 80.0
MIN_NODE_HEIGHT = 40.0
RESIZE_HANDLE = 12.0    # canvas units from the bottom-right corner


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Panning:
    last_pointer: Tuple[float, float]


@dataclass(frozen=True)
class DraggingNode:
    node_id: str
    start_pointer: Tuple[float, float]
    start_position: Position


@dataclass(frozen=True)
class ResizingNode:
    node_id: str
    start_pointer: Tuple[float, float]
    start_size: Size


@dataclass(frozen=True)
class Connecting:
    from_node_id: str


GestureState = Union[Idle, Panning, DraggingNode, ResizingNode, Connecting]


class InteractionStateMachine:
    def __init__(self, store: GraphStore, viewport: Optional[Viewport] = None):
        self.store = store
        self.viewport = viewport or Viewport()
        self.state: GestureState = Idle()
        self.selected_node_id: Optional[str] = None
        self.space_held = False

    @property
    def is_idle(self) -> bool:
        return isinstance(self.state, Idle)

    @property
    def state_name(self) -> str:
        return type(self.state).__name__

    def screen_to_canvas(self, point: Tuple[float, float]) -> Position:
        x, y = self.viewport.screen_to_canvas(*point)
        return Position(x, y)

    # -------------------------
    # Pointer
    # -------------------------

    def pointer_down(self, event: PointerEvent) -> GestureState:
        if not self.is_idle:
            return self.state

        if self._is_pan_trigger(event):
            self.state = Panning(event.point)
            return self.state

        if event.button != LEFT_BUTTON:
            return self.state

        node_id, on_handle = self._hit(event)
        if node_id is None:
            self.selected_node_id = None
            return self.state

        node = self.store.get_node(node_id)
        self.selected_node_id = node_id
        if on_handle:
            self.state = ResizingNode(node_id, event.point, node.size)
        else:
            self.state = DraggingNode(node_id, event.point, node.position)
        logger.debug("[INTERACTION] %s on '%s'", self.state_name, node_id)
        return self.state

    def pointer_move(self, event: PointerEvent) -> Optional[Tuple[float, float]]:
        """
        Apply the active gesture. While panning, returns the screen-space
        offset delta since the previous move.
        """
        state = self.state

        if isinstance(state, Panning):
            dx = event.x - state.last_pointer[0]
            dy = event.y - state.last_pointer[1]
            self.viewport.offset_x += dx
            self.viewport.offset_y += dy
            self.state = replace(state, last_pointer=event.point)
            return (dx, dy)

        if isinstance(state, DraggingNode):
            if self.store.get_node(state.node_id) is None:
                self.state = Idle()
                return None
            dx, dy = self._canvas_delta(state.start_pointer, event.point)
            position = Position(
                max(0.0, state.start_position.x + dx),
                max(0.0, state.start_position.y + dy),
            )
            self.store.update_node(state.node_id, position=position)
            return None

        if isinstance(state, ResizingNode):
            if self.store.get_node(state.node_id) is None:
                self.state = Idle()
                return None
            dx, dy = self._canvas_delta(state.start_pointer, event.point)
            size = Size(
                max(MIN_NODE_WIDTH, state.start_size.width + dx),
                max(MIN_NODE_HEIGHT, state.start_size.height + dy),
            )
            self.store.update_node(state.node_id, size=size)
            return None

        return None

    def pointer_up(self, event: Optional[PointerEvent] = None) -> GestureState:
        if isinstance(self.state, (Panning, DraggingNode, ResizingNode)):
            self.state = Idle()
        return self.state

    # -------------------------
    # Connections
    # -------------------------

    def start_connection(self, node_id: str) -> bool:
        if not self.is_idle or self.store.get_node(node_id) is None:
            return False
        self.state = Connecting(node_id)
        return True

    def end_connection(self, target_id: str, kind=EdgeKind.REFERENCE) -> Optional[Edge]:
        state = self.state
        if not isinstance(state, Connecting):
            return None
        self.state = Idle()
        if target_id == state.from_node_id:
            return None
        edge = self.store.add_edge(state.from_node_id, target_id, kind)
        if edge is not None:
            logger.info("[INTERACTION] Connected '%s' -> '%s'", edge.source, edge.target)
        return edge

    def cancel_connection(self) -> None:
        if isinstance(self.state, Connecting):
            self.state = Idle()

    def canvas_click(self) -> None:
        """Click on the empty background."""
        self.cancel_connection()
        self.selected_node_id = None

    # -------------------------
    # Keyboard
    # -------------------------

    def key_down(self, key: str) -> None:
        if key == " ":
            self.space_held = True
        elif key == "Escape":
            self.selected_node_id = None
            self.cancel_connection()
        elif key in ("Delete", "Backspace"):
            if self.is_idle and self.selected_node_id is not None:
                removed = self.store.remove_node(self.selected_node_id)
                if removed is not None:
                    logger.info("[INTERACTION] Deleted node '%s'", removed.id)
                self.selected_node_id = None

    def key_up(self, key: str) -> None:
        if key == " ":
            self.space_held = False

    # -------------------------
    # Zoom
    # -------------------------

    def wheel(self, delta_y: float, x: Optional[float] = None, y: Optional[float] = None) -> float:
        """
        Zoom out for a positive delta, in otherwise. With a pointer position
        the canvas point under the pointer stays put.
        """
        factor = ZOOM_OUT if delta_y > 0 else ZOOM_IN
        old_scale = self.viewport.scale
        new_scale = min(MAX_SCALE, max(MIN_SCALE, old_scale * factor))

        if x is not None and y is not None:
            cx, cy = self.viewport.screen_to_canvas(x, y)
            self.viewport.offset_x = x - cx * new_scale
            self.viewport.offset_y = y - cy * new_scale
        self.viewport.scale = new_scale
        return new_scale

    def reset_view(self) -> None:
        self.viewport.scale = 1.0
        self.viewport.offset_x = 0.0
        self.viewport.offset_y = 0.0

    def reset(self) -> None:
        self.state = Idle()
        self.selected_node_id = None
        self.space_held = False

    # -------------------------
    # Internals
    # -------------------------

    def _is_pan_trigger(self, event: PointerEvent) -> bool:
        if event.button == MIDDLE_BUTTON:
            return True
        if event.button == LEFT_BUTTON and (event.ctrl or event.meta or self.space_held):
            return True
        return False

    def _canvas_delta(self, start, current) -> Tuple[float, float]:
        scale = self.viewport.scale
        return ((current[0] - start[0]) / scale, (current[1] - start[1]) / scale)

    def _hit(self, event: PointerEvent) -> Tuple[Optional[str], bool]:
        """Node under the pointer and whether the pointer is on its resize handle."""
        if event.target is not None:
            node = self.store.get_node(event.target)
            if node is None:
                return None, False
            if event.on_resize_handle is not None:
                return node.id, event.on_resize_handle
            return node.id, self._on_handle(node, event)

        point = self.screen_to_canvas(event.point)
        # topmost node is the last one drawn
        for node in reversed(self.store.nodes):
            p, s = node.position, node.size
            if p.x <= point.x <= p.x + s.width and p.y <= point.y <= p.y + s.height:
                on_handle = (
                    event.on_resize_handle
                    if event.on_resize_handle is not None
                    else self._on_handle(node, event)
                )
                return node.id, on_handle
        return None, False

    def _on_handle(self, node, event: PointerEvent) -> bool:
        point = self.screen_to_canvas(event.point)
        right = node.position.x + node.size.width
        bottom = node.position.y + node.size.height
        return (
            right - RESIZE_HANDLE <= point.x <= right
            and bottom - RESIZE_HANDLE <= point.y <= bottom
        )
