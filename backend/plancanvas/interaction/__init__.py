from plancanvas.interaction.events import (
    LEFT_BUTTON,
    MIDDLE_BUTTON,
    RIGHT_BUTTON,
    PointerEvent,
    Viewport,
)
from plancanvas.interaction.state_machine import (
    MAX_SCALE,
    MIN_NODE_HEIGHT,
    MIN_NODE_WIDTH,
    MIN_SCALE,
    Connecting,
    DraggingNode,
    GestureState,
    Idle,
    InteractionStateMachine,
    Panning,
    ResizingNode,
)

__all__ = [
    "LEFT_BUTTON",
    "MIDDLE_BUTTON",
    "RIGHT_BUTTON",
    "PointerEvent",
    "Viewport",
    "MAX_SCALE",
    "MIN_NODE_HEIGHT",
    "MIN_NODE_WIDTH",
    "MIN_SCALE",
    "Connecting",
    "DraggingNode",
    "GestureState",
    "Idle",
    "InteractionStateMachine",
    "Panning",
    "ResizingNode",
]
