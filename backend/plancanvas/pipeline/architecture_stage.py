from typing import List, Sequence

from plancanvas.ir import EdgeKind, Node, NodeKind, StageId
from plancanvas.ir.stage_data import ArchitectureData
from plancanvas.pipeline.stage import Entity, Link, StageReconciler


class ArchitectureReconciler(StageReconciler):
    stage = StageId.ARCHITECTURE
    model = ArchitectureData

    def entities(self, data: ArchitectureData) -> List[Entity]:
        entities = [
            Entity(NodeKind.DATABASE_TABLE, table, index)
            for index, table in enumerate(data.database_schema)
        ]
        if data.api_endpoints:
            entities.append(Entity(NodeKind.API_ENDPOINTS, list(data.api_endpoints)))
        entities.extend(
            Entity(NodeKind.ROUTE, route, index)
            for index, route in enumerate(data.sitemap)
        )
        return entities

    def links(self, nodes: Sequence[Node]) -> List[Link]:
        api = next((n for n in nodes if n.kind == NodeKind.API_ENDPOINTS), None)
        if api is None:
            return []
        return [
            Link(n.id, api.id, EdgeKind.DEPENDENCY)
            for n in nodes
            if n.kind == NodeKind.ROUTE
        ]
