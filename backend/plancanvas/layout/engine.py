"""
Layout Engine - recomputes positions for the whole node set.

Only positions change: identity, kind, payload, size and adjacency are kept,
the output has the same nodes in the same order, and a node whose position
is unchanged is returned as the same object.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from plancanvas.ir import Edge, Node, Position
from plancanvas.layout.base import (
    CancellationToken,
    LayoutAlgorithm,
    LayoutCancelled,
    LayoutOptions,
)
from plancanvas.layout.force import force_positions
from plancanvas.layout.grouped import stage_grouped_positions
from plancanvas.layout.hierarchical import hierarchical_positions
from plancanvas.layout.radial import radial_positions

logger = logging.getLogger(__name__)

PositionFn = Callable[
    [Sequence[Node], Sequence[Edge], LayoutOptions, CancellationToken],
    Dict[str, Position],
]

ALGORITHMS: Dict[LayoutAlgorithm, PositionFn] = {
    LayoutAlgorithm.HIERARCHICAL: hierarchical_positions,
    LayoutAlgorithm.FORCE: force_positions,
    LayoutAlgorithm.RADIAL: radial_positions,
    LayoutAlgorithm.STAGE_GROUPED: stage_grouped_positions,
}


def layout(
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    algorithm=LayoutAlgorithm.HIERARCHICAL,
    options: Optional[LayoutOptions] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> List[Node]:
    """
    Run `algorithm` over the graph and return the repositioned nodes.
    Raises LayoutCancelled when `cancel_token` is cancelled mid-run.
    """
    nodes = list(nodes)
    edges = list(edges)
    algorithm = LayoutAlgorithm(algorithm)
    options = options or LayoutOptions()
    token = cancel_token or CancellationToken()

    positions = ALGORITHMS[algorithm](nodes, edges, options, token)
    token.raise_if_cancelled()

    logger.info("[LAYOUT] %s placed %d nodes", algorithm.value, len(positions))
    return [
        node.with_position(positions[node.id]) if node.id in positions else node
        for node in nodes
    ]


class LayoutEngine:
    """
    Keeps the token of the active run; starting a new run, or calling
    `cancel()` (e.g. when a reconciliation begins), supersedes it.
    """

    def __init__(self, options: Optional[LayoutOptions] = None):
        self.options = options or LayoutOptions()
        self._active: Optional[CancellationToken] = None

    @property
    def running(self) -> bool:
        return self._active is not None

    def cancel(self) -> None:
        if self._active is not None:
            self._active.cancel()
            logger.info("[LAYOUT] Active layout cancelled")

    def run(
        self,
        nodes: Iterable[Node],
        edges: Iterable[Edge],
        algorithm=LayoutAlgorithm.HIERARCHICAL,
        options: Optional[LayoutOptions] = None,
    ) -> List[Node]:
        self.cancel()
        token = CancellationToken()
        self._active = token
        try:
            return layout(nodes, edges, algorithm, options or self.options, token)
        finally:
            if self._active is token:
                self._active = None
