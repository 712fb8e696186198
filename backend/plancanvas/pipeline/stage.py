import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Type

from plancanvas.factory import create_node, node_id_for, payload_for, source_id_for
from plancanvas.ir import EdgeKind, Node, NodeKind, StageId
from plancanvas.ir.stage_data import StageModel, parse_stage_data

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Entity:
    """One domain item a stage wants on the canvas."""
    kind: NodeKind
    item: Any
    index: int = 0


@dataclass(frozen=True)
class Link:
    source: str
    target: str
    kind: EdgeKind = EdgeKind.REFERENCE
    directed: bool = True


class StageReconciler(ABC):
    """
    Merges one stage's data into the node collection.

    Must:
    - touch only nodes owned by its own stage
    - keep unchanged nodes as the same objects
    - NEVER raise on malformed stage data
    """

    stage: StageId
    model: Type[StageModel]

    @abstractmethod
    def entities(self, data: StageModel) -> List[Entity]:
        """Every entity present in the validated stage data, in canvas order."""

    def links(self, nodes: Sequence[Node]) -> List[Link]:
        """Edges this stage proposes between its own nodes."""
        return []

    def merge_payload(self, existing: Node, derived: Dict[str, Any]) -> Dict[str, Any]:
        return derived

    @property
    def owner(self) -> str:
        return self.stage.value

    def reconcile(self, current_nodes, new_stage_data, last_stage_data):
        if new_stage_data == last_stage_data:
            return current_nodes

        nodes = list(current_nodes)
        owned = {n.id: n for n in nodes if n.owner == self.owner}
        others = [n for n in nodes if n.owner != self.owner]
        other_ids = {n.id for n in others}

        data = parse_stage_data(self.model, new_stage_data)

        planned = []
        seen = set()
        for entity in self.entities(data):
            node_id = node_id_for(
                entity.kind, source_id_for(entity.kind, entity.item, entity.index)
            )
            if node_id in seen or node_id in other_ids:
                logger.debug("[RECONCILER] %s skipped duplicate id '%s'", self.owner, node_id)
                continue
            seen.add(node_id)
            planned.append((node_id, entity))

        occupied = others + [owned[node_id] for node_id, _ in planned if node_id in owned]
        processed: List[Node] = []

        for node_id, entity in planned:
            existing = owned.get(node_id)
            if existing is None:
                node = create_node(entity.kind, entity.item, entity.index, occupied)
                if node is None:
                    continue
                occupied.append(node)
            else:
                derived = payload_for(entity.kind, entity.item)
                merged = self.merge_payload(existing, derived)
                node = existing if merged == existing.payload else existing.with_payload(merged)
            processed.append(node)

        result = others + processed
        if len(result) == len(nodes) and {id(n) for n in result} == {id(n) for n in nodes}:
            return current_nodes

        dropped = len(owned) - sum(1 for n in processed if n.id in owned)
        logger.info(
            "[RECONCILER] %s: %d owned nodes (%d dropped)",
            self.owner, len(processed), dropped,
        )
        return result
