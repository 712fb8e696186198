from typing import List, Sequence

from plancanvas.ir import EdgeKind, Node, NodeKind, StageId
from plancanvas.ir.stage_data import FeatureData
from plancanvas.pipeline.stage import Entity, Link, StageReconciler


class FeatureReconciler(StageReconciler):
    stage = StageId.FEATURES
    model = FeatureData

    def entities(self, data: FeatureData) -> List[Entity]:
        entities = []

        packs = list(dict.fromkeys(p for p in data.selected_feature_packs if p.strip()))
        for index, pack in enumerate(packs):
            entities.append(Entity(NodeKind.FEATURE_PACK, pack, index))

        for index, feature in enumerate(data.custom_features):
            entities.append(Entity(NodeKind.FEATURE, feature, index))

        if data.natural_language_features:
            entities.append(Entity(NodeKind.FEATURE_DESCRIPTION, data.natural_language_features))

        if data.architecture_prep is not None and not data.architecture_prep.is_empty:
            entities.append(Entity(NodeKind.ARCHITECTURE_BLUEPRINT, data.architecture_prep))

        return entities

    def links(self, nodes: Sequence[Node]) -> List[Link]:
        blueprint = next((n for n in nodes if n.kind == NodeKind.ARCHITECTURE_BLUEPRINT), None)
        if blueprint is None:
            return []
        return [
            Link(blueprint.id, n.id, EdgeKind.REFERENCE)
            for n in nodes
            if n.kind == NodeKind.FEATURE
        ]
