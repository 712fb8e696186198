from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from plancanvas.ir import Edge, Node


@dataclass
class GraphChange:
    """Summary of one reconciliation pass."""
    added: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    edges_added: List[str] = field(default_factory=list)
    edges_removed: List[str] = field(default_factory=list)
    queued: bool = False

    @property
    def changed(self) -> bool:
        return bool(
            self.added or self.updated or self.removed
            or self.edges_added or self.edges_removed
        )

    def to_dict(self) -> dict:
        return {
            "added": self.added,
            "updated": self.updated,
            "removed": self.removed,
            "edges_added": self.edges_added,
            "edges_removed": self.edges_removed,
            "queued": self.queued,
            "changed": self.changed,
        }


def _content(node: Node):
    return (node.kind, node.payload, node.position, node.size, node.provenance)


def diff_graph(
    nodes_before: Iterable[Node],
    edges_before: Iterable[Edge],
    nodes_after: Iterable[Node],
    edges_after: Iterable[Edge],
) -> GraphChange:
    """Changes between two graphs; adjacency-only differences are not updates."""
    before: Dict[str, Node] = {n.id: n for n in nodes_before}
    after: Dict[str, Node] = {n.id: n for n in nodes_after}
    edge_ids_before = [e.id for e in edges_before]
    edge_ids_after = [e.id for e in edges_after]
    known_before, known_after = set(edge_ids_before), set(edge_ids_after)

    return GraphChange(
        added=[i for i in after if i not in before],
        updated=[
            i for i, node in after.items()
            if i in before and node is not before[i] and _content(node) != _content(before[i])
        ],
        removed=[i for i in before if i not in after],
        edges_added=[i for i in edge_ids_after if i not in known_before],
        edges_removed=[i for i in edge_ids_before if i not in known_after],
    )
