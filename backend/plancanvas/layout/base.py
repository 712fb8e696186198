from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Sequence

from plancanvas.config import LAYOUT_MAX_ITERATIONS
from plancanvas.ir import Position


class LayoutAlgorithm(str, Enum):
    HIERARCHICAL = "hierarchical"
    FORCE = "force"
    RADIAL = "radial"
    STAGE_GROUPED = "stage_grouped"


class LayoutCancelled(Exception):
    """A layout run was superseded; its partial result is discarded."""


class CancellationToken:
    def __init__(self):
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise LayoutCancelled()


@dataclass
class LayoutOptions:
    spacing: float = 60.0
    origin: Position = field(default_factory=lambda: Position(100.0, 100.0))
    direction: str = "right"            # "right": ranked columns, "down": ranked rows
    group_by: str = "kind"              # "kind" | "owner" | "rank"
    iterations: int = LAYOUT_MAX_ITERATIONS
    epsilon: float = 0.5
    seed: int = 42
    ring_spacing: float = 260.0
    roots: Optional[Sequence[str]] = None
    columns: int = 3                    # grid width inside a stage region
    on_iteration: Optional[Callable[[int, float], None]] = None
