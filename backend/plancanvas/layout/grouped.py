from collections import defaultdict
from typing import Dict, List, Sequence

from plancanvas.ir import Edge, Node, Position
from plancanvas.layout.base import CancellationToken, LayoutOptions
from plancanvas.layout.hierarchical import owner_sort_key


def stage_grouped_positions(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    options: LayoutOptions,
    token: CancellationToken,
) -> Dict[str, Position]:
    """
    One region per owner, left to right in stage order, each region a grid
    of `options.columns` columns. Edges play no part.
    """
    groups: Dict[str, List[Node]] = defaultdict(list)
    for node in nodes:
        groups[node.owner].append(node)

    columns = max(options.columns, 1)
    positions: Dict[str, Position] = {}
    cursor = options.origin.x

    for owner in sorted(groups, key=owner_sort_key):
        token.raise_if_cancelled()
        members = sorted(groups[owner], key=lambda n: n.id)
        cell_w = max(n.size.width for n in members) + options.spacing
        cell_h = max(n.size.height for n in members) + options.spacing

        for index, node in enumerate(members):
            row, col = divmod(index, columns)
            positions[node.id] = Position(
                cursor + col * cell_w,
                options.origin.y + row * cell_h,
            )

        cursor += min(columns, len(members)) * cell_w + options.spacing
    return positions
