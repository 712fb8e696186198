"""
Graph Store - the authoritative node and edge collections.

The store is the only mutation surface of the canvas. Every operation is
synchronous and leaves the graph consistent:
- node ids are unique
- every edge endpoint exists; removing a node removes its edges
- each node's adjacency matches the edges touching it

Misuse (unknown ids, duplicate edges, self loops) is a silent no-op reported
through the return value, never an exception.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional

from plancanvas.ir import Edge, EdgeKind, Node, Position, Size
from plancanvas.validation import GraphFixer, GraphValidationResult, GraphValidator

logger = logging.getLogger(__name__)


def _parse_edge_kind(kind) -> Optional[EdgeKind]:
    if isinstance(kind, EdgeKind):
        return kind
    try:
        return EdgeKind(kind)
    except (ValueError, TypeError):
        return None


def _coerce_position(value) -> Optional[Position]:
    if value is None or isinstance(value, Position):
        return value
    try:
        if isinstance(value, Mapping):
            return Position(float(value.get("x", 0)), float(value.get("y", 0)))
        x, y = value
        return Position(float(x), float(y))
    except (TypeError, ValueError):
        return None


def _coerce_size(value) -> Optional[Size]:
    if value is None or isinstance(value, Size):
        return value
    try:
        if isinstance(value, Mapping):
            return Size(float(value.get("width", 0)), float(value.get("height", 0)))
        width, height = value
        return Size(float(width), float(height))
    except (TypeError, ValueError):
        return None


class GraphStore:
    def __init__(self, nodes: Iterable[Node] = (), edges: Iterable[Edge] = ()):
        self._nodes: Dict[str, Node] = {}
        self._edges: Dict[str, Edge] = {}
        self._fixer = GraphFixer()
        self.version = 0
        self.replace(nodes, edges)
        self.version = 0

    # -------------------------
    # Reads
    # -------------------------

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges.values())

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        return self._edges.get(edge_id)

    def edges_for(self, node_id: str) -> List[Edge]:
        return [e for e in self._edges.values() if e.touches(node_id)]

    def has_edge_between(self, source: str, target: str, directed: bool = True) -> bool:
        probe = Edge.between(source, target, directed=directed)
        return any(e.id == probe.id or e.duplicates(probe) for e in self._edges.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id) -> bool:
        return node_id in self._nodes

    # -------------------------
    # Node mutations
    # -------------------------

    def add_node(self, node: Node) -> bool:
        if node.id in self._nodes:
            logger.debug("[STORE] add_node ignored, id '%s' already exists", node.id)
            return False
        self._nodes[node.id] = node.with_adjacency(frozenset())
        self._touch()
        return True

    def update_node(
        self,
        node_id: str,
        payload: Optional[dict] = None,
        position=None,
        size=None,
        replace_payload: bool = False,
    ) -> Optional[Node]:
        """
        Merge `payload` into the node's payload (or replace it) and/or set
        its geometry. Returns the resulting node, None for an unknown id.
        """
        node = self._nodes.get(node_id)
        if node is None:
            return None

        updated = node
        if isinstance(payload, Mapping):
            new_payload = dict(payload) if replace_payload else {**node.payload, **payload}
            if new_payload != node.payload:
                updated = updated.with_payload(new_payload)
        position = _coerce_position(position)
        if position is not None:
            updated = updated.with_position(position)
        size = _coerce_size(size)
        if size is not None:
            updated = updated.with_size(size)

        if updated is not node:
            self._nodes[node_id] = updated
            self._touch()
        return updated

    def remove_node(self, node_id: str) -> Optional[Node]:
        node = self._nodes.pop(node_id, None)
        if node is None:
            return None

        touching = [e for e in self._edges.values() if e.touches(node_id)]
        for edge in touching:
            del self._edges[edge.id]
        self._refresh_adjacency(node.adjacency)

        logger.debug(
            "[STORE] Removed node '%s' and %d edges", node_id, len(touching),
        )
        self._touch()
        return node

    # -------------------------
    # Edge mutations
    # -------------------------

    def add_edge(
        self,
        source: str,
        target: str,
        kind=EdgeKind.REFERENCE,
        directed: bool = True,
    ) -> Optional[Edge]:
        edge_kind = _parse_edge_kind(kind)
        if edge_kind is None:
            return None
        if source == target:
            return None
        if source not in self._nodes or target not in self._nodes:
            return None

        edge = Edge.between(source, target, edge_kind, directed)
        if edge.id in self._edges or any(e.duplicates(edge) for e in self._edges.values()):
            return None

        self._edges[edge.id] = edge
        self._refresh_adjacency((source, target))
        self._touch()
        return edge

    def remove_edge(self, edge_id: str) -> bool:
        edge = self._edges.pop(edge_id, None)
        if edge is None:
            return False
        self._refresh_adjacency((edge.source, edge.target))
        self._touch()
        return True

    # -------------------------
    # Bulk operations
    # -------------------------

    def replace_nodes(self, nodes: Iterable[Node]) -> None:
        """Replace the node set; edges left dangling are dropped."""
        self.replace(nodes, self._edges.values())

    def replace_edges(self, edges: Iterable[Edge]) -> None:
        self.replace(self._nodes.values(), edges)

    def replace(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> None:
        fixed_nodes, fixed_edges, result = self._fixer.fix(list(nodes), list(edges))
        if result.changed:
            logger.debug("[STORE] Normalised replacement: %s", "; ".join(result.changes_made))
        self._nodes = {n.id: n for n in fixed_nodes}
        self._edges = {e.id: e for e in fixed_edges}
        self._touch()

    def apply_positions(self, positions: Mapping[str, Position]) -> int:
        """Set positions by node id; unknown ids are ignored. Returns the number moved."""
        moved = 0
        for node_id, position in positions.items():
            node = self._nodes.get(node_id)
            position = _coerce_position(position)
            if node is None or position is None:
                continue
            updated = node.with_position(position)
            if updated is not node:
                self._nodes[node_id] = updated
                moved += 1
        if moved:
            self._touch()
        return moved

    def clear(self) -> None:
        self._nodes = {}
        self._edges = {}
        self._touch()

    def validate(self) -> GraphValidationResult:
        return GraphValidator().validate(self.nodes, self.edges)

    # -------------------------
    # Internals
    # -------------------------

    def _touch(self) -> None:
        self.version += 1

    def _refresh_adjacency(self, node_ids: Iterable[str]) -> None:
        for node_id in set(node_ids):
            node = self._nodes.get(node_id)
            if node is None:
                continue
            neighbours = set()
            for edge in self._edges.values():
                if edge.source == node_id:
                    neighbours.add(edge.target)
                elif edge.target == node_id:
                    neighbours.add(edge.source)
            self._nodes[node_id] = node.with_adjacency(neighbours)
