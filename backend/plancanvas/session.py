"""
CanvasSession - the object a caller owns for one canvas.

Wires the Graph Store to the sync controller, the layout engine and the
interaction state machine, and routes node edits back to stage records.
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from plancanvas.api.serializers import (
    auto_edges_from_dict,
    auto_edges_to_dict,
    edges_from_dicts,
    graph_to_dict,
    nodes_from_dicts,
    stage_snapshot_from_dict,
    stage_snapshot_to_dict,
)
from plancanvas.factory import create_user_node
from plancanvas.graph import GraphStore
from plancanvas.interaction import (
    MAX_SCALE,
    MIN_SCALE,
    InteractionStateMachine,
    PointerEvent,
    Viewport,
)
from plancanvas.ir import Edge, EdgeKind, Node, StageId, normalize_stage_id
from plancanvas.layout import LayoutAlgorithm, LayoutCancelled, LayoutEngine, LayoutOptions
from plancanvas.pipeline import CanvasSyncController, EditProjector, GraphChange

logger = logging.getLogger(__name__)

ProjectionCallback = Callable[[StageId, Dict[str, Any]], None]


class CanvasSession:
    def __init__(
        self,
        nodes=(),
        edges=(),
        reconcilers=None,
        layout_options: Optional[LayoutOptions] = None,
        on_projection: Optional[ProjectionCallback] = None,
    ):
        self.store = GraphStore(nodes, edges)
        self.controller = CanvasSyncController(self.store, reconcilers)
        self.layout_engine = LayoutEngine(layout_options)
        self.interaction = InteractionStateMachine(self.store)
        self.projector = EditProjector()
        self.on_projection = on_projection
        self.last_projection: Optional[Tuple[StageId, Dict[str, Any]]] = None

        # A reconciliation supersedes any layout in flight
        self.controller.before_pass = self.layout_engine.cancel

    @property
    def nodes(self):
        return self.store.nodes

    @property
    def edges(self):
        return self.store.edges

    # -------------------------
    # Stage data
    # -------------------------

    def process_stage_data(self, stage_data: Mapping) -> GraphChange:
        return self.controller.process(stage_data)

    # -------------------------
    # Layout
    # -------------------------

    def run_layout(
        self,
        algorithm=LayoutAlgorithm.HIERARCHICAL,
        options: Optional[LayoutOptions] = None,
    ) -> Optional[int]:
        """
        Lay out the current graph and commit the positions.
        Returns the number of nodes moved, or None when the run was cancelled.
        """
        try:
            placed = self.layout_engine.run(self.store.nodes, self.store.edges, algorithm, options)
        except LayoutCancelled:
            logger.info("[LAYOUT] Layout cancelled, positions discarded")
            return None
        return self.store.apply_positions({n.id: n.position for n in placed})

    # -------------------------
    # Direct edits
    # -------------------------

    def add_user_node(self, kind, payload=None, position=None, size=None) -> Optional[Node]:
        node = create_user_node(kind, payload, position, self.store.nodes, size)
        if node is None or not self.store.add_node(node):
            return None
        return self.store.get_node(node.id)

    def edit_node(
        self,
        node_id: str,
        payload: Optional[dict] = None,
        position=None,
        size=None,
        replace_payload: bool = False,
    ) -> Optional[Node]:
        """
        Update a node, then project a payload edit onto the stage record it
        came from. The projected record becomes the controller's last
        processed snapshot so the echo back through `process_stage_data`
        changes nothing.
        """
        node = self.store.update_node(node_id, payload, position, size, replace_payload)
        if node is None or payload is None:
            return node

        stage = normalize_stage_id(node.owner)
        if stage is None:
            return node

        record = self.projector.project(node, self.controller.last_processed.get(stage))
        if record is None:
            return node

        self.controller.record_processed(stage, record)
        self.last_projection = (stage, record)
        if self.on_projection is not None:
            self.on_projection(stage, record)
        return node

    def delete_node(self, node_id: str) -> Optional[Node]:
        removed = self.store.remove_node(node_id)
        if removed is not None and self.interaction.selected_node_id == node_id:
            self.interaction.selected_node_id = None
        return removed

    def connect(self, source: str, target: str, kind=EdgeKind.REFERENCE, directed: bool = True) -> Optional[Edge]:
        return self.store.add_edge(source, target, kind, directed)

    def disconnect(self, edge_id: str) -> bool:
        return self.store.remove_edge(edge_id)

    def replace_graph(self, nodes, edges) -> None:
        self.store.replace(nodes, edges)
        self.interaction.reset()

    def validate(self):
        return self.store.validate()

    # -------------------------
    # Interaction passthrough
    # -------------------------

    def pointer_down(self, event: PointerEvent):
        return self.interaction.pointer_down(event)

    def pointer_move(self, event: PointerEvent):
        return self.interaction.pointer_move(event)

    def pointer_up(self, event: Optional[PointerEvent] = None):
        return self.interaction.pointer_up(event)

    def key_down(self, key: str) -> None:
        self.interaction.key_down(key)

    def key_up(self, key: str) -> None:
        self.interaction.key_up(key)

    def wheel(self, delta_y: float, x: Optional[float] = None, y: Optional[float] = None) -> float:
        return self.interaction.wheel(delta_y, x, y)

    def start_connection(self, node_id: str) -> bool:
        return self.interaction.start_connection(node_id)

    def end_connection(self, target_id: str, kind=EdgeKind.REFERENCE) -> Optional[Edge]:
        return self.interaction.end_connection(target_id, kind)

    def canvas_click(self) -> None:
        self.interaction.canvas_click()

    # -------------------------
    # Snapshots
    # -------------------------

    def snapshot(self) -> Dict[str, Any]:
        data = graph_to_dict(self.store.nodes, self.store.edges)
        data["lastProcessed"] = stage_snapshot_to_dict(self.controller.last_processed)
        data["autoEdges"] = auto_edges_to_dict(self.controller.auto_edges)
        data["viewport"] = self.interaction.viewport.to_dict()
        return data

    def restore(self, data: Mapping) -> None:
        """Load a snapshot produced by `snapshot()`; malformed parts are dropped."""
        self.layout_engine.cancel()
        self.controller.reset()
        self.replace_graph(
            nodes_from_dicts(data.get("nodes") or []),
            edges_from_dicts(data.get("edges") or []),
        )
        self.controller.last_processed.update(
            stage_snapshot_from_dict(data.get("lastProcessed"))
        )
        self.controller.restore_auto_edges(auto_edges_from_dict(data.get("autoEdges")))

        viewport = data.get("viewport")
        if isinstance(viewport, dict):
            offset = viewport.get("offset") if isinstance(viewport.get("offset"), dict) else {}
            try:
                scale = min(MAX_SCALE, max(MIN_SCALE, float(viewport.get("scale", 1.0))))
                self.interaction.viewport = Viewport(
                    scale, float(offset.get("x", 0.0)), float(offset.get("y", 0.0)),
                )
            except (TypeError, ValueError):
                self.interaction.viewport = Viewport()
        logger.info("[SESSION] Restored %d nodes, %d edges", len(self.store), len(self.store.edges))

    @classmethod
    def from_snapshot(cls, data: Mapping, **kwargs) -> "CanvasSession":
        session = cls(**kwargs)
        session.restore(data)
        return session
