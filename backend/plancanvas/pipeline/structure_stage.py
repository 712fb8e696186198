from typing import List, Sequence

from plancanvas.ir import EdgeKind, Node, NodeKind, StageId
from plancanvas.ir.stage_data import StructureData
from plancanvas.pipeline.stage import Entity, Link, StageReconciler


def step_mentions(step: str, screen_name: str) -> bool:
    step = step.strip().lower()
    name = screen_name.strip().lower()
    return bool(name) and (step == name or name in step)


class StructureReconciler(StageReconciler):
    stage = StageId.STRUCTURE
    model = StructureData

    def entities(self, data: StructureData) -> List[Entity]:
        entities = [
            Entity(NodeKind.SCREEN, screen, index)
            for index, screen in enumerate(data.screens)
        ]
        entities.extend(
            Entity(NodeKind.USER_FLOW, flow, index)
            for index, flow in enumerate(data.user_flows)
        )
        return entities

    def links(self, nodes: Sequence[Node]) -> List[Link]:
        screens = [n for n in nodes if n.kind == NodeKind.SCREEN]
        links = []
        for flow in (n for n in nodes if n.kind == NodeKind.USER_FLOW):
            steps = [s for s in flow.payload.get("steps", []) if isinstance(s, str)]
            for screen in screens:
                name = screen.payload.get("name") or ""
                if any(step_mentions(step, name) for step in steps):
                    links.append(Link(flow.id, screen.id, EdgeKind.FLOW))
        return links
