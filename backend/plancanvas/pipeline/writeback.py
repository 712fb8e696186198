"""
Edit write-back - projects a node edit onto its originating stage record.

Projection is a separate step from the store mutation: the caller mutates
the node first, then asks the projector for a patched copy of the stage
record and hands it to whoever owns the stage data.
"""

import copy
from typing import Any, Dict, Optional, Sequence, Tuple

from plancanvas.factory import source_id_for
from plancanvas.ir import Node, NodeKind
from plancanvas.pipeline.ideation_stage import TARGET_USERS_SOURCE_ID

# kind -> (record key, payload key)
SINGLETON_FIELDS: Dict[NodeKind, Tuple[Tuple[str, str], ...]] = {
    NodeKind.APP_NAME: (("appName", "value"),),
    NodeKind.TAGLINE: (("tagline", "value"),),
    NodeKind.CORE_PROBLEM: (("problemStatement", "value"),),
    NodeKind.MISSION: (("appIdea", "value"), ("missionStatement", "missionStatement")),
    NodeKind.VALUE_PROP: (("valueProposition", "value"),),
    NodeKind.PLATFORM: (("platform", "value"),),
    NodeKind.UI_STYLE: (("uiStyle", "value"),),
    NodeKind.TECH_STACK: (("techStack", "items"),),
    NodeKind.FEATURE_DESCRIPTION: (("naturalLanguageFeatures", "value"),),
    NodeKind.DESIGN_SYSTEM: (("selectedDesignSystem", "value"),),
}

# kind -> (candidate list keys, payload keys copied onto the item)
COLLECTION_FIELDS: Dict[NodeKind, Tuple[Sequence[str], Sequence[str]]] = {
    NodeKind.USER_PERSONA: (("userPersonas", "personas"), ("name", "role", "painPoint", "emoji")),
    NodeKind.COMPETITOR: (
        ("competitorData", "competitors"),
        ("name", "notes", "link", "domain", "tagline", "features", "pricingTiers",
         "marketPositioning", "strengths", "weaknesses"),
    ),
    NodeKind.FEATURE: (
        ("customFeatures",),
        ("name", "description", "priority", "complexity", "category", "subFeatures"),
    ),
    NodeKind.SCREEN: (("screens",), ("name", "type", "description")),
    NodeKind.USER_FLOW: (("userFlows",), ("name", "steps")),
    NodeKind.DATABASE_TABLE: (("databaseSchema",), ("name", "fields")),
    NodeKind.ROUTE: (("sitemap",), ("path", "component", "protected", "description")),
}


class EditProjector:
    """
    Usage:
        record = EditProjector().project(node, stage_data)
        if record is not None:
            publish(node.owner, record)
    """

    def project(self, node: Node, stage_data: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if node.provenance.is_user:
            return None

        record = copy.deepcopy(stage_data) if isinstance(stage_data, dict) else {}

        if node.kind in SINGLETON_FIELDS:
            for record_key, payload_key in SINGLETON_FIELDS[node.kind]:
                if payload_key in node.payload:
                    record[record_key] = copy.deepcopy(node.payload[payload_key])
            return record

        if node.kind == NodeKind.USER_PERSONA and node.provenance.source_id == TARGET_USERS_SOURCE_ID:
            record["targetUsers"] = node.payload.get("painPoint", "")
            return record

        if node.kind in COLLECTION_FIELDS:
            return self._project_item(node, record)

        return None

    def _project_item(self, node: Node, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        list_keys, fields = COLLECTION_FIELDS[node.kind]
        key = next((k for k in list_keys if isinstance(record.get(k), list)), None)
        if key is None:
            return None

        for index, item in enumerate(record[key]):
            if not isinstance(item, dict):
                continue
            if source_id_for(node.kind, item, index) != node.provenance.source_id:
                continue
            for field_name in fields:
                if field_name in node.payload:
                    item[field_name] = copy.deepcopy(node.payload[field_name])
            # Pin identity so a renamed item keeps its node
            item.setdefault("id", node.provenance.source_id)
            return record
        return None
