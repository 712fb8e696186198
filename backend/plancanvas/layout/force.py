"""
Force-directed layout.

Each iteration applies all-pairs repulsion, spring attraction along edges
and a weak pull toward the starting centroid, then integrates damped
velocities. The run stops at the iteration budget or once no node moves
more than `epsilon`. Coincident nodes are pushed apart with a seeded RNG,
so the result only depends on the input graph and the seed.
"""

import logging
import math
import random
from typing import Dict, List, Sequence, Tuple

from plancanvas.ir import Edge, Node, Position
from plancanvas.layout.base import CancellationToken, LayoutOptions

logger = logging.getLogger(__name__)

K_REPULSE = 20000.0     # node-node repulsion strength
K_SPRING = 0.05         # edge spring stiffness
EDGE_BASE_LEN = 220.0   # preferred spring length baseline
EDGE_EXTRA_PAD = 0.6    # extra spring length by node sizes
CENTER_PULL = 0.01      # weak gravity toward the centroid
DAMPING = 0.85          # velocity damping per step
MAX_STEP = 50.0         # largest move of one node in one iteration


class _Body:
    __slots__ = ("id", "w", "h", "x", "y", "vx", "vy")

    def __init__(self, node: Node):
        self.id = node.id
        self.w = node.size.width
        self.h = node.size.height
        self.x = node.position.x + self.w / 2
        self.y = node.position.y + self.h / 2
        self.vx = 0.0
        self.vy = 0.0


def _spring_length(a: _Body, b: _Body) -> float:
    return EDGE_BASE_LEN + EDGE_EXTRA_PAD * 0.5 * (max(a.w, a.h) + max(b.w, b.h))


def force_positions(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    options: LayoutOptions,
    token: CancellationToken,
) -> Dict[str, Position]:
    if not nodes:
        return {}

    rng = random.Random(options.seed)
    bodies: List[_Body] = [_Body(n) for n in sorted(nodes, key=lambda n: n.id)]
    by_id = {b.id: b for b in bodies}
    springs: List[Tuple[_Body, _Body]] = [
        (by_id[e.source], by_id[e.target])
        for e in sorted(edges, key=lambda e: e.id)
        if e.source in by_id and e.target in by_id and e.source != e.target
    ]

    cx0 = sum(b.x for b in bodies) / len(bodies)
    cy0 = sum(b.y for b in bodies) / len(bodies)

    iteration = 0
    for iteration in range(1, max(options.iterations, 0) + 1):
        token.raise_if_cancelled()

        # repulsion (all pairs)
        for i, a in enumerate(bodies):
            for b in bodies[i + 1:]:
                dx = a.x - b.x
                dy = a.y - b.y
                d2 = dx * dx + dy * dy
                if d2 < 1e-6:
                    # coincident: jitter to break symmetry
                    dx = rng.random() - 0.5
                    dy = rng.random() - 0.5
                    d2 = dx * dx + dy * dy or 1e-6
                d = math.sqrt(d2)
                f = K_REPULSE / d2
                a.vx += f * dx / d
                a.vy += f * dy / d
                b.vx -= f * dx / d
                b.vy -= f * dy / d

        # springs
        for a, b in springs:
            dx = b.x - a.x
            dy = b.y - a.y
            d = math.hypot(dx, dy) or 1e-6
            f = K_SPRING * (d - _spring_length(a, b))
            a.vx += f * dx / d
            a.vy += f * dy / d
            b.vx -= f * dx / d
            b.vy -= f * dy / d

        # integrate with damping, capped per step
        max_move = 0.0
        for body in bodies:
            body.vx += -CENTER_PULL * (body.x - cx0)
            body.vy += -CENTER_PULL * (body.y - cy0)
            step_x = max(-MAX_STEP, min(MAX_STEP, body.vx))
            step_y = max(-MAX_STEP, min(MAX_STEP, body.vy))
            body.x += step_x
            body.y += step_y
            body.vx *= DAMPING
            body.vy *= DAMPING
            max_move = max(max_move, math.hypot(step_x, step_y))

        if options.on_iteration is not None:
            options.on_iteration(iteration, max_move)

        if max_move < options.epsilon:
            logger.debug("[LAYOUT] Force layout converged after %d iterations", iteration)
            break
    else:
        logger.debug("[LAYOUT] Force layout stopped at the iteration budget (%d)", iteration)

    return {
        b.id: Position(b.x - b.w / 2, b.y - b.h / 2)
        for b in bodies
    }
