import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from plancanvas.api.serializers import (
    edge_to_dict,
    edges_from_dicts,
    graph_to_dict,
    node_to_dict,
    nodes_from_dicts,
)
from plancanvas.db.session import get_db, load_snapshot, save_snapshot
from plancanvas.ir import parse_kind
from plancanvas.schemas import (
    EdgeCreateRequest,
    GraphPayload,
    LayoutRequest,
    NodeCreateRequest,
    NodeUpdateRequest,
    StageDataRequest,
)
from plancanvas.session import CanvasSession

logger = logging.getLogger(__name__)


class CanvasRegistry:
    """In-memory sessions keyed by project id."""

    def __init__(self):
        self._sessions: Dict[str, CanvasSession] = {}

    def get(self, project_id: str) -> Optional[CanvasSession]:
        return self._sessions.get(project_id)

    def get_or_create(self, project_id: str) -> CanvasSession:
        session = self._sessions.get(project_id)
        if session is None:
            session = CanvasSession()
            self._sessions[project_id] = session
            logger.info("[API] Opened canvas '%s'", project_id)
        return session

    def put(self, project_id: str, session: CanvasSession) -> None:
        self._sessions[project_id] = session

    def clear(self) -> None:
        self._sessions.clear()


registry = CanvasRegistry()


def get_registry() -> CanvasRegistry:
    return registry


router = APIRouter(prefix="/canvas/{project_id}", tags=["canvas"])


def _require(registry: CanvasRegistry, project_id: str) -> CanvasSession:
    session = registry.get(project_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown canvas '{project_id}'")
    return session


def _graph_response(project_id: str, session: CanvasSession) -> dict:
    return {
        "projectId": project_id,
        "version": session.store.version,
        **graph_to_dict(session.nodes, session.edges),
    }


@router.get("")
def get_graph(project_id: str, registry: CanvasRegistry = Depends(get_registry)):
    session = _require(registry, project_id)
    return _graph_response(project_id, session)


@router.put("/graph")
def replace_graph(
    project_id: str,
    request: GraphPayload,
    registry: CanvasRegistry = Depends(get_registry),
):
    session = registry.get_or_create(project_id)
    session.replace_graph(nodes_from_dicts(request.nodes), edges_from_dicts(request.edges))
    return _graph_response(project_id, session)


@router.post("/stages")
def process_stages(
    project_id: str,
    request: StageDataRequest,
    registry: CanvasRegistry = Depends(get_registry),
):
    session = registry.get_or_create(project_id)
    change = session.process_stage_data(request.stage_data)
    return {"change": change.to_dict(), **_graph_response(project_id, session)}


@router.post("/layout")
def run_layout(
    project_id: str,
    request: LayoutRequest,
    registry: CanvasRegistry = Depends(get_registry),
):
    session = _require(registry, project_id)
    moved = session.run_layout(request.algorithm, request.to_options())
    return {
        "status": "cancelled" if moved is None else "success",
        "moved": moved or 0,
        **_graph_response(project_id, session),
    }


@router.post("/nodes", status_code=201)
def create_node(
    project_id: str,
    request: NodeCreateRequest,
    registry: CanvasRegistry = Depends(get_registry),
):
    session = _require(registry, project_id)
    if parse_kind(request.kind) is None:
        raise HTTPException(status_code=422, detail=f"Unknown node kind '{request.kind}'")

    node = session.add_user_node(
        request.kind,
        request.payload,
        request.position.to_position() if request.position else None,
        request.size.to_size() if request.size else None,
    )
    return {"node": node_to_dict(node)}


@router.patch("/nodes/{node_id}")
def update_node(
    project_id: str,
    node_id: str,
    request: NodeUpdateRequest,
    registry: CanvasRegistry = Depends(get_registry),
):
    session = _require(registry, project_id)
    session.last_projection = None
    node = session.edit_node(
        node_id,
        payload=request.payload,
        position=request.position.to_position() if request.position else None,
        size=request.size.to_size() if request.size else None,
        replace_payload=request.replace_payload,
    )
    if node is None:
        raise HTTPException(status_code=404, detail=f"Unknown node '{node_id}'")

    projection = None
    if session.last_projection is not None:
        stage, record = session.last_projection
        projection = {"stage": stage.value, "record": record}
    return {"node": node_to_dict(node), "projection": projection}


@router.delete("/nodes/{node_id}")
def delete_node(
    project_id: str,
    node_id: str,
    registry: CanvasRegistry = Depends(get_registry),
):
    session = _require(registry, project_id)
    if session.delete_node(node_id) is None:
        raise HTTPException(status_code=404, detail=f"Unknown node '{node_id}'")
    return {"status": "deleted", "id": node_id}


@router.post("/edges")
def create_edge(
    project_id: str,
    request: EdgeCreateRequest,
    registry: CanvasRegistry = Depends(get_registry),
):
    session = _require(registry, project_id)
    edge = session.connect(request.source, request.target, request.kind, request.directed)
    if edge is None:
        return {"status": "rejected", "edge": None}
    return {"status": "created", "edge": edge_to_dict(edge)}


@router.delete("/edges/{edge_id}")
def delete_edge(
    project_id: str,
    edge_id: str,
    registry: CanvasRegistry = Depends(get_registry),
):
    session = _require(registry, project_id)
    if not session.disconnect(edge_id):
        raise HTTPException(status_code=404, detail=f"Unknown edge '{edge_id}'")
    return {"status": "deleted", "id": edge_id}


@router.post("/validate")
def validate(project_id: str, registry: CanvasRegistry = Depends(get_registry)):
    session = _require(registry, project_id)
    return session.validate().to_dict()


@router.post("/save")
def save(
    project_id: str,
    registry: CanvasRegistry = Depends(get_registry),
    db: Session = Depends(get_db),
):
    session = _require(registry, project_id)
    try:
        save_snapshot(db, project_id, session.snapshot())
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("[API] Saving canvas '%s' failed: %s", project_id, e)
        raise HTTPException(status_code=503, detail="Persistence unavailable")
    return {"status": "saved", "projectId": project_id}


@router.post("/load")
def load(
    project_id: str,
    registry: CanvasRegistry = Depends(get_registry),
    db: Session = Depends(get_db),
):
    try:
        snapshot = load_snapshot(db, project_id)
    except SQLAlchemyError as e:
        logger.error("[API] Loading canvas '%s' failed: %s", project_id, e)
        raise HTTPException(status_code=503, detail="Persistence unavailable")
    if snapshot is None:
        raise HTTPException(status_code=404, detail=f"No saved canvas '{project_id}'")

    session = CanvasSession.from_snapshot(snapshot)
    registry.put(project_id, session)
    return _graph_response(project_id, session)
