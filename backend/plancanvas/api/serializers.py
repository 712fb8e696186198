"""
Boundary adapters between the canonical Node/Edge model and JSON.

Deserialization is tolerant: records with an unknown kind or without an id
are skipped, missing geometry falls back to the kind's defaults.
"""

from typing import Any, Dict, Iterable, List, Optional

from plancanvas.ir import (
    USER_OWNER,
    Edge,
    EdgeKind,
    Node,
    Position,
    Provenance,
    Size,
    StageId,
    normalize_stage_id,
    parse_kind,
)
from plancanvas.placement import default_size

PRIMITIVE_TYPES = (str, int, float, bool, type(None))


def serialize_value(obj: Any):
    """JSON-compatible copy of payload values. Deterministic."""
    if isinstance(obj, PRIMITIVE_TYPES):
        return obj
    if isinstance(obj, (list, tuple)):
        return [serialize_value(item) for item in obj]
    if isinstance(obj, (set, frozenset)):
        return sorted(serialize_value(item) for item in obj)
    if isinstance(obj, dict):
        return {str(k): serialize_value(v) for k, v in obj.items()}
    if hasattr(obj, "model_dump"):
        return serialize_value(obj.model_dump(by_alias=True))
    if hasattr(obj, "__dict__"):
        return {
            key: serialize_value(value)
            for key, value in obj.__dict__.items()
            if not key.startswith("_")
        }
    return str(obj)


def node_to_dict(node: Node) -> Dict[str, Any]:
    return {
        "id": node.id,
        "kind": node.kind.value,
        "payload": serialize_value(node.payload),
        "position": {"x": node.position.x, "y": node.position.y},
        "size": {"width": node.size.width, "height": node.size.height},
        "provenance": {
            "owner": node.provenance.owner,
            "sourceId": node.provenance.source_id,
            "generated": node.provenance.generated,
        },
        "adjacency": sorted(node.adjacency),
    }


def edge_to_dict(edge: Edge) -> Dict[str, Any]:
    return {
        "id": edge.id,
        "source": edge.source,
        "target": edge.target,
        "kind": edge.kind.value,
        "directed": edge.directed,
    }


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def node_from_dict(data: Any) -> Optional[Node]:
    if not isinstance(data, dict):
        return None
    node_id = data.get("id")
    kind = parse_kind(data.get("kind"))
    if not isinstance(node_id, str) or not node_id or kind is None:
        return None

    position = data.get("position") if isinstance(data.get("position"), dict) else {}
    size = data.get("size") if isinstance(data.get("size"), dict) else {}
    fallback = default_size(kind)
    provenance = data.get("provenance") if isinstance(data.get("provenance"), dict) else {}
    owner = provenance.get("owner")
    if not isinstance(owner, str) or not owner:
        owner = USER_OWNER
    payload = data.get("payload")

    return Node(
        id=node_id,
        kind=kind,
        payload=dict(payload) if isinstance(payload, dict) else {},
        position=Position(_number(position.get("x"), 0.0), _number(position.get("y"), 0.0)),
        size=Size(
            _number(size.get("width"), fallback.width),
            _number(size.get("height"), fallback.height),
        ),
        provenance=Provenance(
            owner=owner,
            source_id=provenance.get("sourceId"),
            generated=bool(provenance.get("generated", owner != USER_OWNER)),
        ),
        adjacency=frozenset(a for a in data.get("adjacency") or [] if isinstance(a, str)),
    )


def edge_from_dict(data: Any) -> Optional[Edge]:
    if not isinstance(data, dict):
        return None
    source, target = data.get("source"), data.get("target")
    if not isinstance(source, str) or not isinstance(target, str):
        return None
    try:
        kind = EdgeKind(data.get("kind", EdgeKind.REFERENCE.value))
    except ValueError:
        kind = EdgeKind.REFERENCE
    directed = bool(data.get("directed", True))
    edge = Edge.between(source, target, kind, directed)
    edge_id = data.get("id")
    if isinstance(edge_id, str) and edge_id:
        edge = Edge(edge_id, source, target, kind, directed)
    return edge


def nodes_from_dicts(items: Iterable[Any]) -> List[Node]:
    return [n for n in (node_from_dict(i) for i in items or []) if n is not None]


def edges_from_dicts(items: Iterable[Any]) -> List[Edge]:
    return [e for e in (edge_from_dict(i) for i in items or []) if e is not None]


def graph_to_dict(nodes: Iterable[Node], edges: Iterable[Edge]) -> Dict[str, Any]:
    return {
        "nodes": [node_to_dict(n) for n in nodes],
        "edges": [edge_to_dict(e) for e in edges],
    }


def stage_snapshot_to_dict(last_processed: Dict[StageId, Any]) -> Dict[str, Any]:
    return {stage.value: serialize_value(data) for stage, data in last_processed.items()}


def auto_edges_to_dict(auto_edges: Dict[StageId, Any]) -> Dict[str, List[str]]:
    return {stage.value: sorted(ids) for stage, ids in auto_edges.items()}


def auto_edges_from_dict(data: Any) -> Dict[StageId, List[str]]:
    if not isinstance(data, dict):
        return {}
    auto_edges = {}
    for key, value in data.items():
        stage = normalize_stage_id(key)
        if stage is not None and isinstance(value, list):
            auto_edges[stage] = [v for v in value if isinstance(v, str)]
    return auto_edges


def stage_snapshot_from_dict(data: Any) -> Dict[StageId, Any]:
    if not isinstance(data, dict):
        return {}
    snapshot = {}
    for key, value in data.items():
        stage = normalize_stage_id(key)
        if stage is not None:
            snapshot[stage] = value
    return snapshot
