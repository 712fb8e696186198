"""
Radial layout - roots in the middle, everything else on concentric rings
by graph distance from the nearest root.

Roots are either given explicitly or chosen per owner (highest degree,
ties broken by id). Nodes no root can reach go on one extra outer ring.
"""

import math
from collections import defaultdict, deque
from typing import Dict, List, Sequence

from plancanvas.ir import Edge, Node, Position
from plancanvas.layout.base import CancellationToken, LayoutOptions


def pick_roots(nodes: Sequence[Node], edges: Sequence[Edge]) -> List[str]:
    degree: Dict[str, int] = defaultdict(int)
    for edge in edges:
        degree[edge.source] += 1
        degree[edge.target] += 1

    best: Dict[str, Node] = {}
    for node in nodes:
        current = best.get(node.owner)
        if current is None:
            best[node.owner] = node
            continue
        if (-degree[node.id], node.id) < (-degree[current.id], current.id):
            best[node.owner] = node
    return sorted(n.id for n in best.values())


def radial_positions(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    options: LayoutOptions,
    token: CancellationToken,
) -> Dict[str, Position]:
    if not nodes:
        return {}

    by_id = {n.id: n for n in nodes}
    if options.roots:
        roots = [r for r in dict.fromkeys(options.roots) if r in by_id]
    else:
        roots = []
    if not roots:
        roots = pick_roots(nodes, edges)

    neighbours: Dict[str, List[str]] = defaultdict(list)
    for edge in edges:
        if edge.source in by_id and edge.target in by_id and edge.source != edge.target:
            neighbours[edge.source].append(edge.target)
            neighbours[edge.target].append(edge.source)

    # multi-source BFS, remembering which root reached each node first
    distance: Dict[str, int] = {}
    origin_root: Dict[str, int] = {}
    queue = deque()
    for order, root in enumerate(roots):
        distance[root] = 0
        origin_root[root] = order
        queue.append(root)
    while queue:
        token.raise_if_cancelled()
        current = queue.popleft()
        for nxt in sorted(neighbours.get(current, [])):
            if nxt not in distance:
                distance[nxt] = distance[current] + 1
                origin_root[nxt] = origin_root[current]
                queue.append(nxt)

    outer = max(distance.values(), default=0) + 1
    rings: Dict[int, List[str]] = defaultdict(list)
    for node in nodes:
        ring = distance.get(node.id, outer)
        rings[ring].append(node.id)

    # several roots share ring 0, so every ring moves out by half a step
    shift = 0.5 if len(roots) > 1 else 0.0
    max_radius = (max(rings) + shift) * options.ring_spacing
    center_x = options.origin.x + max_radius
    center_y = options.origin.y + max_radius

    positions: Dict[str, Position] = {}
    for ring in sorted(rings):
        members = sorted(
            rings[ring],
            key=lambda node_id: (origin_root.get(node_id, len(roots)), node_id),
        )
        radius = (ring + shift) * options.ring_spacing
        for index, node_id in enumerate(members):
            node = by_id[node_id]
            angle = -math.pi / 2 + 2 * math.pi * index / len(members)
            cx = center_x + radius * math.cos(angle)
            cy = center_y + radius * math.sin(angle)
            positions[node_id] = Position(cx - node.size.width / 2, cy - node.size.height / 2)
    return positions
