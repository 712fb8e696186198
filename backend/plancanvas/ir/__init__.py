from .kinds import (
    COLLECTION_KINDS,
    FREEFORM_KINDS,
    KIND_ORDER,
    KIND_STAGE,
    SINGLETON_KINDS,
    STAGE_ALIASES,
    STAGE_ORDER,
    USER_OWNER,
    EdgeKind,
    NodeKind,
    StageId,
    normalize_stage_id,
    parse_kind,
)
from .graph import Edge, Node, Position, Provenance, Size, edge_id_for

__all__ = [
    "COLLECTION_KINDS",
    "FREEFORM_KINDS",
    "KIND_ORDER",
    "KIND_STAGE",
    "SINGLETON_KINDS",
    "STAGE_ALIASES",
    "STAGE_ORDER",
    "USER_OWNER",
    "EdgeKind",
    "NodeKind",
    "StageId",
    "normalize_stage_id",
    "parse_kind",
    "Edge",
    "Node",
    "Position",
    "Provenance",
    "Size",
    "edge_id_for",
]
