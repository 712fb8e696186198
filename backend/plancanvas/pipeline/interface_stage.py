from typing import List

from plancanvas.ir import NodeKind, StageId
from plancanvas.ir.stage_data import InterfaceData
from plancanvas.pipeline.stage import Entity, StageReconciler


class InterfaceReconciler(StageReconciler):
    stage = StageId.INTERFACE
    model = InterfaceData

    def entities(self, data: InterfaceData) -> List[Entity]:
        entities = []
        if data.selected_design_system:
            entities.append(Entity(NodeKind.DESIGN_SYSTEM, data.selected_design_system))

        branding = data.custom_branding
        if branding is not None and any(branding.model_dump().values()):
            entities.append(Entity(NodeKind.BRANDING, branding))

        if data.layout_blocks:
            entities.append(Entity(NodeKind.LAYOUT, list(data.layout_blocks)))
        return entities
