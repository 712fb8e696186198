from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from plancanvas.ir import EdgeKind, Position, Size
from plancanvas.layout import LayoutAlgorithm, LayoutOptions


class PositionModel(BaseModel):
    x: float
    y: float

    def to_position(self) -> Position:
        return Position(self.x, self.y)


class SizeModel(BaseModel):
    width: float = Field(gt=0)
    height: float = Field(gt=0)

    def to_size(self) -> Size:
        return Size(self.width, self.height)


class GraphPayload(BaseModel):
    """Serialized nodes and edges; malformed entries are dropped on load."""
    nodes: List[Dict[str, Any]] = []
    edges: List[Dict[str, Any]] = []


class StageDataRequest(BaseModel):
    stage_data: Dict[str, Any]  # {"ideation": {...}, "features": {...}, ...}


class LayoutRequest(BaseModel):
    algorithm: LayoutAlgorithm = LayoutAlgorithm.HIERARCHICAL
    spacing: Optional[float] = None
    direction: Optional[Literal["right", "down"]] = None
    group_by: Optional[Literal["kind", "owner", "rank"]] = None
    iterations: Optional[int] = Field(default=None, ge=0)
    seed: Optional[int] = None
    ring_spacing: Optional[float] = None
    roots: Optional[List[str]] = None
    columns: Optional[int] = Field(default=None, ge=1)

    def to_options(self) -> LayoutOptions:
        overrides = self.model_dump(exclude={"algorithm"}, exclude_none=True)
        return LayoutOptions(**overrides)


class NodeCreateRequest(BaseModel):
    kind: str
    payload: Dict[str, Any] = {}
    position: Optional[PositionModel] = None
    size: Optional[SizeModel] = None


class NodeUpdateRequest(BaseModel):
    payload: Optional[Dict[str, Any]] = None
    position: Optional[PositionModel] = None
    size: Optional[SizeModel] = None
    replace_payload: bool = False


class EdgeCreateRequest(BaseModel):
    source: str
    target: str
    kind: EdgeKind = EdgeKind.REFERENCE
    directed: bool = True
