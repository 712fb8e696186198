"""
Hierarchical layout - groups nodes by a structural key and lays the groups
out as ranked columns (direction "right") or rows (direction "down").

Group keys:
- kind:  fixed node kind order
- owner: stage order, then user nodes, then any other owner alphabetically
- rank:  longest path from the edge sources, with cycles broken first
"""

from collections import defaultdict
from typing import Dict, List, Sequence, Set, Tuple

from plancanvas.ir import KIND_ORDER, STAGE_ORDER, USER_OWNER, Edge, Node, Position
from plancanvas.layout.base import CancellationToken, LayoutOptions

STAGE_RANK = {stage.value: index for index, stage in enumerate(STAGE_ORDER)}


def owner_sort_key(owner: str) -> Tuple[int, str]:
    if owner in STAGE_RANK:
        return (STAGE_RANK[owner], "")
    if owner == USER_OWNER:
        return (len(STAGE_RANK), "")
    return (len(STAGE_RANK) + 1, owner)


def _back_edges(node_ids: List[str], adj: Dict[str, List[str]]) -> Set[Tuple[str, str]]:
    """Edges closing a cycle in a depth-first walk; iterative so deep graphs are fine."""
    state: Dict[str, int] = {}   # 1 = on stack, 2 = done
    back: Set[Tuple[str, str]] = set()
    for start in node_ids:
        if start in state:
            continue
        state[start] = 1
        stack = [(start, iter(adj.get(start, [])))]
        while stack:
            node, children = stack[-1]
            child = next(children, None)
            if child is None:
                state[node] = 2
                stack.pop()
            elif state.get(child) == 1:
                back.add((node, child))
            elif child not in state:
                state[child] = 1
                stack.append((child, iter(adj.get(child, []))))
    return back


def assign_ranks(nodes: Sequence[Node], edges: Sequence[Edge]) -> Dict[str, int]:
    """Longest-path rank of every node; isolated nodes get rank 0."""
    node_ids = sorted(n.id for n in nodes)
    known = set(node_ids)
    adj: Dict[str, List[str]] = defaultdict(list)
    for edge in edges:
        if edge.source in known and edge.target in known and edge.source != edge.target:
            adj[edge.source].append(edge.target)
    for children in adj.values():
        children.sort()

    back = _back_edges(node_ids, adj)
    dag: Dict[str, List[str]] = {
        source: [t for t in targets if (source, t) not in back]
        for source, targets in adj.items()
    }

    indegree = {node_id: 0 for node_id in node_ids}
    for targets in dag.values():
        for target in targets:
            indegree[target] += 1

    ranks = {node_id: 0 for node_id in node_ids}
    ready = [node_id for node_id in node_ids if indegree[node_id] == 0]
    while ready:
        node = ready.pop(0)
        for child in dag.get(node, []):
            ranks[child] = max(ranks[child], ranks[node] + 1)
            indegree[child] -= 1
            if indegree[child] == 0:
                ready.append(child)
    return ranks


def _group_key(nodes: Sequence[Node], edges: Sequence[Edge], group_by: str):
    if group_by == "owner":
        return lambda n: owner_sort_key(n.owner)
    if group_by == "rank":
        ranks = assign_ranks(nodes, edges)
        return lambda n: ranks[n.id]
    kind_rank = {kind: index for index, kind in enumerate(KIND_ORDER)}
    return lambda n: kind_rank.get(n.kind, len(kind_rank))


def hierarchical_positions(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    options: LayoutOptions,
    token: CancellationToken,
) -> Dict[str, Position]:
    key = _group_key(nodes, edges, options.group_by)
    groups: Dict[object, List[Node]] = defaultdict(list)
    for node in nodes:
        groups[key(node)].append(node)

    positions: Dict[str, Position] = {}
    horizontal = options.direction != "down"
    cursor = options.origin.x if horizontal else options.origin.y

    for group_key in sorted(groups):
        token.raise_if_cancelled()
        members = sorted(groups[group_key], key=lambda n: n.id)
        offset = options.origin.y if horizontal else options.origin.x
        extent = 0.0
        for node in members:
            if horizontal:
                positions[node.id] = Position(cursor, offset)
                offset += node.size.height + options.spacing
                extent = max(extent, node.size.width)
            else:
                positions[node.id] = Position(offset, cursor)
                offset += node.size.width + options.spacing
                extent = max(extent, node.size.height)
        cursor += extent + options.spacing

    return positions
