from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Optional

from .kinds import EdgeKind, NodeKind, USER_OWNER


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0

    def offset(self, dx: float, dy: float) -> "Position":
        return Position(self.x + dx, self.y + dy)


@dataclass(frozen=True)
class Size:
    width: float = 180.0
    height: float = 100.0


@dataclass(frozen=True)
class Provenance:
    owner: str                          # stage id or "user"
    source_id: Optional[str] = None     # stable id of the originating domain item
    generated: bool = True

    @property
    def is_user(self) -> bool:
        return self.owner == USER_OWNER


@dataclass(frozen=True)
class Node:
    id: str
    kind: NodeKind
    payload: Dict[str, Any] = field(default_factory=dict)
    position: Position = field(default_factory=Position)
    size: Size = field(default_factory=Size)
    provenance: Provenance = field(default_factory=lambda: Provenance(owner=USER_OWNER, generated=False))
    adjacency: FrozenSet[str] = frozenset()

    @property
    def owner(self) -> str:
        return self.provenance.owner

    def with_payload(self, payload: Dict[str, Any]) -> "Node":
        return replace(self, payload=payload)

    def with_position(self, position: Position) -> "Node":
        if position == self.position:
            return self
        return replace(self, position=position)

    def with_size(self, size: Size) -> "Node":
        if size == self.size:
            return self
        return replace(self, size=size)

    def with_adjacency(self, adjacency) -> "Node":
        adjacency = frozenset(adjacency)
        if adjacency == self.adjacency:
            return self
        return replace(self, adjacency=adjacency)


def edge_id_for(source: str, target: str, directed: bool = True) -> str:
    if directed:
        return f"edge:{source}->{target}"
    a, b = sorted((source, target))
    return f"edge:{a}--{b}"


@dataclass(frozen=True)
class Edge:
    id: str
    source: str
    target: str
    kind: EdgeKind = EdgeKind.REFERENCE
    directed: bool = True

    @classmethod
    def between(
        cls,
        source: str,
        target: str,
        kind: EdgeKind = EdgeKind.REFERENCE,
        directed: bool = True,
    ) -> "Edge":
        return cls(
            id=edge_id_for(source, target, directed),
            source=source,
            target=target,
            kind=kind,
            directed=directed,
        )

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id

    def duplicates(self, other: "Edge") -> bool:
        """
        Directed edges clash on the same ordered pair, undirected edges on
        the unordered pair. An undirected edge clashes with any edge on its pair.
        """
        same_order = self.source == other.source and self.target == other.target
        reversed_order = self.source == other.target and self.target == other.source
        if self.directed and other.directed:
            return same_order
        return same_order or reversed_order
