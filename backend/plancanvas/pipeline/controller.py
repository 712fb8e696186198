import copy
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set

from plancanvas.graph import GraphStore
from plancanvas.ir import Node, StageId, normalize_stage_id
from plancanvas.pipeline.architecture_stage import ArchitectureReconciler
from plancanvas.pipeline.auth_stage import AuthReconciler
from plancanvas.pipeline.changes import GraphChange, diff_graph
from plancanvas.pipeline.feature_stage import FeatureReconciler
from plancanvas.pipeline.ideation_stage import IdeationReconciler
from plancanvas.pipeline.interface_stage import InterfaceReconciler
from plancanvas.pipeline.stage import StageReconciler
from plancanvas.pipeline.structure_stage import StructureReconciler

logger = logging.getLogger(__name__)


def default_reconcilers() -> List[StageReconciler]:
    return [
        IdeationReconciler(),
        FeatureReconciler(),
        StructureReconciler(),
        ArchitectureReconciler(),
        InterfaceReconciler(),
        AuthReconciler(),
    ]


def normalize_stage_data(stage_data: Optional[Mapping]) -> Dict[StageId, Any]:
    """Key stage data by StageId; unknown stage keys are ignored."""
    normalized: Dict[StageId, Any] = {}
    if not isinstance(stage_data, Mapping):
        return normalized
    for key, value in stage_data.items():
        stage = normalize_stage_id(key)
        if stage is None:
            logger.debug("[CONTROLLER] Ignoring unknown stage '%s'", key)
            continue
        normalized[stage] = value
    return normalized


class CanvasSyncController:
    """
    Runs every stage reconciler, in a fixed order, against the store.

    One pass at a time: a call made while a pass is running is queued and
    only the latest queued stage data is processed once the pass finishes.
    """

    def __init__(
        self,
        store: GraphStore,
        reconcilers: Optional[Iterable[StageReconciler]] = None,
    ):
        self.store = store
        self.reconcilers = list(reconcilers) if reconcilers is not None else default_reconcilers()
        self.last_processed: Dict[StageId, Any] = {}
        self.before_pass: Optional[Callable[[], None]] = None
        self._auto_edges: Dict[StageId, Set[str]] = defaultdict(set)
        self._processing = False
        self._pending = None

    @property
    def processing(self) -> bool:
        return self._processing

    def process(self, stage_data: Mapping) -> GraphChange:
        if self._processing:
            self._pending = copy.deepcopy(stage_data)
            logger.info("[CONTROLLER] Pass in progress, queued stage data")
            return GraphChange(queued=True)

        nodes_before = self.store.nodes
        edges_before = self.store.edges

        self._processing = True
        try:
            self._run_pass(stage_data)
            while self._pending is not None:
                pending, self._pending = self._pending, None
                self._run_pass(pending)
        finally:
            self._processing = False

        change = diff_graph(nodes_before, edges_before, self.store.nodes, self.store.edges)
        if change.changed:
            logger.info(
                "[CONTROLLER] +%d ~%d -%d nodes, +%d -%d edges",
                len(change.added), len(change.updated), len(change.removed),
                len(change.edges_added), len(change.edges_removed),
            )
        return change

    def record_processed(self, stage, stage_data) -> None:
        """Remember `stage_data` as already reflected on the canvas."""
        stage = normalize_stage_id(stage)
        if stage is not None:
            self.last_processed[stage] = copy.deepcopy(stage_data)

    @property
    def auto_edges(self) -> Dict[StageId, Set[str]]:
        """Ids of the edges each stage drew, which it may also remove."""
        return {stage: set(ids) for stage, ids in self._auto_edges.items() if ids}

    def restore_auto_edges(self, auto_edges: Mapping) -> None:
        self._auto_edges.clear()
        for stage, edge_ids in auto_edges.items():
            stage = normalize_stage_id(stage)
            if stage is None:
                continue
            self._auto_edges[stage].update(
                edge_id for edge_id in edge_ids if self.store.get_edge(edge_id) is not None
            )

    def reset(self) -> None:
        self.last_processed.clear()
        self._auto_edges.clear()
        self._pending = None

    # -------------------------
    # Internals
    # -------------------------

    def _run_pass(self, stage_data: Mapping) -> None:
        if self.before_pass is not None:
            self.before_pass()

        incoming = normalize_stage_data(stage_data)
        start = self.store.nodes
        nodes = start
        changed_stages: List[StageReconciler] = []

        for reconciler in self.reconcilers:
            if reconciler.stage not in incoming:
                continue

            new_data = incoming[reconciler.stage]
            result = reconciler.reconcile(nodes, new_data, self.last_processed.get(reconciler.stage))
            if result is not nodes:
                nodes = self._guard_ownership(reconciler, nodes, list(result))
                changed_stages.append(reconciler)
            self.last_processed[reconciler.stage] = copy.deepcopy(new_data)

        if nodes is not start:
            self.store.replace_nodes(nodes)

        for reconciler in changed_stages:
            self._sync_links(reconciler)

    def _guard_ownership(
        self,
        reconciler: StageReconciler,
        before: List[Node],
        result: List[Node],
    ) -> List[Node]:
        owner = reconciler.owner
        foreign_before = [n for n in before if n.owner != owner]
        foreign_after = [n for n in result if n.owner != owner]

        intact = len(foreign_before) == len(foreign_after) and all(
            a is b for a, b in zip(foreign_before, foreign_after)
        )
        if intact:
            return result

        logger.warning(
            "[RECONCILER] %s altered nodes it does not own, restoring them", owner,
        )
        return foreign_before + [n for n in result if n.owner == owner]

    def _sync_links(self, reconciler: StageReconciler) -> None:
        stage = reconciler.stage
        owned = [n for n in self.store.nodes if n.owner == reconciler.owner]
        proposed = set()

        for link in reconciler.links(owned):
            edge = self.store.add_edge(link.source, link.target, link.kind, link.directed)
            if edge is not None:
                self._auto_edges[stage].add(edge.id)
                proposed.add(edge.id)
            else:
                existing = [
                    e for e in self.store.edges_for(link.source)
                    if e.source == link.source and e.target == link.target
                ]
                proposed.update(e.id for e in existing)

        for edge_id in sorted(self._auto_edges[stage] - proposed):
            self.store.remove_edge(edge_id)
            self._auto_edges[stage].discard(edge_id)
