from typing import Any, Dict, List, Sequence

from plancanvas.ir import EdgeKind, Node, NodeKind, StageId
from plancanvas.ir.stage_data import IdeationData, Persona
from plancanvas.pipeline.stage import Entity, Link, StageReconciler

TARGET_USERS_SOURCE_ID = "target-users"


def legacy_persona(target_users: str) -> Persona:
    """Older stage data only carries a free-text target audience."""
    return Persona(
        id=TARGET_USERS_SOURCE_ID,
        name="Target User",
        role="Primary User",
        pain_point=target_users,
    )


class IdeationReconciler(StageReconciler):
    stage = StageId.IDEATION
    model = IdeationData

    def entities(self, data: IdeationData) -> List[Entity]:
        entities = []

        if data.app_name:
            entities.append(Entity(NodeKind.APP_NAME, data.app_name))
        if data.tagline:
            entities.append(Entity(NodeKind.TAGLINE, data.tagline))
        if data.problem_statement:
            entities.append(Entity(NodeKind.CORE_PROBLEM, data.problem_statement))
        if data.app_idea or data.mission_statement:
            entities.append(Entity(NodeKind.MISSION, {
                "appIdea": data.app_idea,
                "missionStatement": data.mission_statement,
            }))
        if data.value_proposition:
            entities.append(Entity(NodeKind.VALUE_PROP, data.value_proposition))
        if data.platform:
            entities.append(Entity(NodeKind.PLATFORM, data.platform))
        if data.tech_stack:
            entities.append(Entity(NodeKind.TECH_STACK, list(data.tech_stack)))
        if data.ui_style:
            entities.append(Entity(NodeKind.UI_STYLE, data.ui_style))

        if data.user_personas is not None:
            for index, persona in enumerate(data.user_personas):
                entities.append(Entity(NodeKind.USER_PERSONA, persona, index))
        elif data.target_users:
            entities.append(Entity(NodeKind.USER_PERSONA, legacy_persona(data.target_users)))

        for index, competitor in enumerate(data.competitors):
            entities.append(Entity(NodeKind.COMPETITOR, competitor, index))

        return entities

    def merge_payload(self, existing: Node, derived: Dict[str, Any]) -> Dict[str, Any]:
        if existing.kind != NodeKind.APP_NAME:
            return derived

        # Renames keep a trail of earlier names
        history = list(existing.payload.get("nameHistory") or [])
        previous = existing.payload.get("value")
        if previous and previous != derived.get("value"):
            history.append(previous)
        return {**derived, "nameHistory": history}

    def links(self, nodes: Sequence[Node]) -> List[Link]:
        ids = {n.id for n in nodes}
        pairs = [
            (NodeKind.APP_NAME, NodeKind.TAGLINE),
            (NodeKind.CORE_PROBLEM, NodeKind.VALUE_PROP),
            (NodeKind.MISSION, NodeKind.APP_NAME),
        ]
        return [
            Link(source.value, target.value, EdgeKind.REFERENCE)
            for source, target in pairs
            if source.value in ids and target.value in ids
        ]
