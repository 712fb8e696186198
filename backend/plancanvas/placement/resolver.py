"""
Placement Resolver - collision-aware positioning for new nodes.

Given the nodes already on the canvas, a desired size and an anchor, the
resolver returns the anchor when no existing node overlaps it. Otherwise it probes a square
spiral of grid cells around the anchor, nearest ring first, and returns the
first free cell. When every probe is taken it falls back to the anchor and
accepts the overlap.

The search is fully deterministic so that reconciliation stays idempotent.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from plancanvas.ir import Node, Position, Size
from plancanvas.placement.zones import CANVAS_BOUNDS, MIN_SPACING, default_anchor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def padded(self, padding: float) -> "Rect":
        return Rect(
            self.x - padding,
            self.y - padding,
            self.width + 2 * padding,
            self.height + 2 * padding,
        )


def node_rect(node: Node) -> Rect:
    return Rect(node.position.x, node.position.y, node.size.width, node.size.height)


def rects_overlap(a: Rect, b: Rect, padding: float = 0.0) -> bool:
    """True when `a`, grown by `padding` on every side, intersects `b`."""
    if padding:
        a = a.padded(padding)
    return (
        a.x < b.right
        and a.right > b.x
        and a.y < b.bottom
        and a.bottom > b.y
    )


def find_overlaps(
    nodes: Iterable[Node],
    position: Position,
    size: Size,
    spacing: float = 0.0,
) -> List[Node]:
    candidate = Rect(position.x, position.y, size.width, size.height)
    return [n for n in nodes if rects_overlap(candidate, node_rect(n), spacing)]


def _within_bounds(position: Position, size: Size, bounds: Tuple[float, float]) -> bool:
    low, high = bounds
    return (
        position.x >= low
        and position.y >= low
        and position.x + size.width <= high
        and position.y + size.height <= high
    )


def _spiral_offsets(max_rings: int) -> Iterator[Tuple[int, int]]:
    """Grid offsets of rings 1..max_rings, each ring ordered by distance then angle."""
    for ring in range(1, max_rings + 1):
        cells = []
        for i in range(-ring, ring + 1):
            for j in range(-ring, ring + 1):
                if max(abs(i), abs(j)) != ring:
                    continue
                angle = math.atan2(j, i) % (2 * math.pi)
                cells.append((i * i + j * j, angle, i, j))
        cells.sort()
        for _, _, i, j in cells:
            yield i, j


def resolve(
    existing_nodes: Iterable[Node],
    desired_size: Size,
    kind=None,
    anchor: Optional[Position] = None,
    *,
    spacing: float = MIN_SPACING,
    max_rings: int = 12,
    bounds: Optional[Tuple[float, float]] = None,
) -> Position:
    """
    Return a position for a node of `desired_size` that does not overlap any
    of `existing_nodes` (keeping `spacing` clear around it), searching
    outward from `anchor`. Never raises.
    """
    nodes = list(existing_nodes)
    if anchor is None:
        anchor = default_anchor(kind)
    if bounds is None:
        bounds = CANVAS_BOUNDS

    if not find_overlaps(nodes, anchor, desired_size):
        return anchor

    step_x = desired_size.width + spacing
    step_y = desired_size.height + spacing

    for i, j in _spiral_offsets(max_rings):
        probe = anchor.offset(i * step_x, j * step_y)
        if not _within_bounds(probe, desired_size, bounds):
            continue
        if not find_overlaps(nodes, probe, desired_size, spacing):
            return probe

    logger.debug(
        "[PLACEMENT] No free cell for %s within %d rings, using anchor (%s, %s)",
        getattr(kind, "value", kind), max_rings, anchor.x, anchor.y,
    )
    return anchor
