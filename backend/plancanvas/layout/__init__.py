from plancanvas.layout.base import (
    CancellationToken,
    LayoutAlgorithm,
    LayoutCancelled,
    LayoutOptions,
)
from plancanvas.layout.engine import ALGORITHMS, LayoutEngine, layout
from plancanvas.layout.hierarchical import assign_ranks
from plancanvas.layout.radial import pick_roots

__all__ = [
    "CancellationToken",
    "LayoutAlgorithm",
    "LayoutCancelled",
    "LayoutOptions",
    "ALGORITHMS",
    "LayoutEngine",
    "layout",
    "assign_ranks",
    "pick_roots",
]
