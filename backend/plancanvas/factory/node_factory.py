"""
Node Factory - one pure constructor per node kind.

Each constructor turns a single domain item into a Node:
1. id from the identity rule (fixed for singletons, "<kind>:<source_id>" for collections)
2. payload from the item, with defaults for absent optional fields
3. position from the Placement Resolver, starting at the kind's zone
4. provenance stamped with the owning stage

Constructors never mutate their inputs.
"""

import re
import uuid
from typing import Any, Callable, Dict, Iterable, List, Optional

from plancanvas.config import PLACEMENT_MAX_RINGS
from plancanvas.ir import (
    COLLECTION_KINDS,
    KIND_STAGE,
    USER_OWNER,
    Node,
    NodeKind,
    Position,
    Provenance,
    Size,
    parse_kind,
)
from plancanvas.ir.stage_data import (
    ApiEndpoint,
    ArchitecturePrep,
    AuthMethod,
    Branding,
    Competitor,
    CustomFeature,
    DatabaseTable,
    ItemModel,
    LayoutBlock,
    Persona,
    Route,
    Screen,
    SecurityFeature,
    UserFlow,
    UserRole,
)
from plancanvas.placement import default_size, grid_anchor, resolve


FEATURE_PACK_TITLES = {
    "auth": "Authentication & Users",
    "crud": "Data Management",
    "social": "Social Features",
    "communication": "Communication",
    "commerce": "E-commerce",
    "analytics": "Analytics & Reporting",
    "media": "Media & Files",
    "ai": "AI & Automation",
}

DEFAULT_SUB_FEATURES = {
    "auth": [
        "User registration with email/password",
        "Login/logout functionality",
        "Password reset flow",
        "User profile management",
        "Role-based access control",
    ],
    "social": [
        "User profiles and connections",
        "Content sharing capabilities",
        "Like/reaction system",
        "Comment functionality",
        "Activity feed",
    ],
    "commerce": [
        "Product catalog and browsing",
        "Shopping cart functionality",
        "Checkout process",
        "Payment processing",
        "Order management",
    ],
    "analytics": [
        "User activity tracking",
        "Performance metrics dashboard",
        "Custom report generation",
        "Data visualization",
        "Export capabilities",
    ],
    "media": [
        "File upload and storage",
        "Media playback controls",
        "Gallery/library management",
        "Media organization (folders/tags)",
        "Sharing capabilities",
    ],
    "communication": [
        "Direct messaging",
        "Group chat functionality",
        "Notification system",
        "Message status tracking",
        "Media sharing in messages",
    ],
}

# Item models for collection kinds; raw dict items are validated through these
ITEM_MODELS = {
    NodeKind.USER_PERSONA: Persona,
    NodeKind.COMPETITOR: Competitor,
    NodeKind.FEATURE: CustomFeature,
    NodeKind.SCREEN: Screen,
    NodeKind.USER_FLOW: UserFlow,
    NodeKind.DATABASE_TABLE: DatabaseTable,
    NodeKind.ROUTE: Route,
    NodeKind.BRANDING: Branding,
    NodeKind.ARCHITECTURE_BLUEPRINT: ArchitecturePrep,
}

# Singleton kinds built from a whole list of records
LIST_ITEM_MODELS = {
    NodeKind.API_ENDPOINTS: ApiEndpoint,
    NodeKind.LAYOUT: LayoutBlock,
    NodeKind.AUTH_METHODS: AuthMethod,
    NodeKind.USER_ROLES: UserRole,
    NodeKind.SECURITY_FEATURES: SecurityFeature,
}


# -------------------------
# Identity
# -------------------------

def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def _coerce_item(kind: NodeKind, item: Any) -> Any:
    model = ITEM_MODELS.get(kind)
    if model is not None:
        if isinstance(item, dict):
            return model.model_validate(item)
        return item if isinstance(item, model) else model()
    model = LIST_ITEM_MODELS.get(kind)
    if model is not None:
        if not isinstance(item, (list, tuple)):
            return []
        return [
            model.model_validate(i) if isinstance(i, dict) else i
            for i in item
            if isinstance(i, (dict, model))
        ]
    return item


def source_id_for(kind, item: Any, index: int = 0) -> Optional[str]:
    """
    Stable identity of a collection item: its own id, else a slug of its
    natural key, else its index. Singleton kinds have no source id.
    """
    kind = parse_kind(kind)
    if kind not in COLLECTION_KINDS:
        return None
    item = _coerce_item(kind, item)

    if isinstance(item, ItemModel):
        if item.id:
            return item.id
        key = item.natural_key()
    elif isinstance(item, str):
        key = item.strip()
    else:
        key = None

    if key:
        slug = slugify(key)
        if slug:
            return slug
    return str(index)


def node_id_for(kind, source_id: Optional[str] = None) -> str:
    kind = parse_kind(kind)
    if kind in COLLECTION_KINDS:
        return f"{kind.value}:{source_id}"
    return kind.value


# -------------------------
# Payloads
# -------------------------

def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _value_payload(item: Any) -> Dict[str, Any]:
    return {"value": _text(item)}


def _app_name_payload(item: Any) -> Dict[str, Any]:
    return {"value": _text(item), "nameHistory": []}


def _core_problem_payload(item: Any) -> Dict[str, Any]:
    return {"value": _text(item), "keywords": []}


def _mission_payload(item: Any) -> Dict[str, Any]:
    if isinstance(item, dict):
        return {
            "value": _text(item.get("appIdea")),
            "missionStatement": _text(item.get("missionStatement")),
        }
    return {"value": _text(item), "missionStatement": ""}


def _value_prop_payload(item: Any) -> Dict[str, Any]:
    return {"value": _text(item), "bulletPoints": []}


def _tech_stack_payload(item: Any) -> Dict[str, Any]:
    return {"items": [t for t in (item or []) if isinstance(t, str)]}


def _persona_payload(item: Persona) -> Dict[str, Any]:
    return {
        "name": item.name or "User Persona",
        "role": item.role or "Role",
        "painPoint": item.pain_point or "Pain point",
        "emoji": item.emoji or "👤",
    }


def _competitor_payload(item: Competitor) -> Dict[str, Any]:
    return {
        "name": item.name or "",
        "notes": item.notes or "",
        "link": item.link or "",
        "domain": item.domain or "",
        "tagline": item.tagline or "",
        "features": list(item.features),
        "pricingTiers": list(item.pricing_tiers),
        "marketPositioning": item.market_positioning or "",
        "strengths": list(item.strengths),
        "weaknesses": list(item.weaknesses),
    }


def _feature_pack_payload(item: Any) -> Dict[str, Any]:
    pack = _text(item)
    return {
        "pack": pack,
        "title": FEATURE_PACK_TITLES.get(pack, pack[:1].upper() + pack[1:]),
        "subFeatures": list(DEFAULT_SUB_FEATURES.get(pack, [])),
    }


def _feature_payload(item: CustomFeature) -> Dict[str, Any]:
    return {
        "name": item.name or "Custom feature",
        "description": item.description or "Custom feature",
        "priority": item.priority or "medium",
        "complexity": item.complexity or "medium",
        "category": item.category or "both",
        "subFeatures": list(item.sub_features),
    }


def _blueprint_payload(item: ArchitecturePrep) -> Dict[str, Any]:
    return {
        "screens": list(item.screens),
        "apiRoutes": list(item.api_routes),
        "components": list(item.components),
    }


def _screen_payload(item: Screen) -> Dict[str, Any]:
    return {
        "name": item.name or "Screen",
        "type": item.type or "page",
        "description": item.description or "Core app screen",
    }


def _user_flow_payload(item: UserFlow) -> Dict[str, Any]:
    return {"name": item.name or "User flow", "steps": list(item.steps)}


def _table_payload(item: DatabaseTable) -> Dict[str, Any]:
    return {
        "name": item.name or "table",
        "fields": [
            {"name": f.name or "", "type": f.type or "string"}
            for f in item.fields
        ],
    }


def _api_endpoints_payload(item: List[ApiEndpoint]) -> Dict[str, Any]:
    endpoints = [
        {
            "method": (e.method or "GET").upper(),
            "path": e.path or "/",
            "description": e.description or "",
        }
        for e in item
    ]
    return {"endpoints": endpoints, "count": len(endpoints)}


def _route_payload(item: Route) -> Dict[str, Any]:
    return {
        "path": item.path or "/",
        "component": item.component or "",
        "protected": bool(item.protected),
        "description": item.description or "",
    }


def _branding_payload(item: Branding) -> Dict[str, Any]:
    return {
        "primaryColor": item.primary_color or "",
        "secondaryColor": item.secondary_color or "",
        "fontFamily": item.font_family or "",
        "borderRadius": item.border_radius or "",
    }


def _layout_payload(item: List[LayoutBlock]) -> Dict[str, Any]:
    blocks = [b.type for b in item if b.type]
    return {"blocks": blocks, "count": len(item)}


def _auth_methods_payload(item: List[AuthMethod]) -> Dict[str, Any]:
    return {"methods": [m.name or m.id or "" for m in item]}


def _user_roles_payload(item: List[UserRole]) -> Dict[str, Any]:
    return {
        "roles": [
            {"name": r.name or "", "description": r.description or ""}
            for r in item
        ]
    }


def _security_features_payload(item: List[SecurityFeature]) -> Dict[str, Any]:
    return {"features": [f.name or f.id or "" for f in item]}


def _note_payload(item: Any) -> Dict[str, Any]:
    payload = {"title": "Note", "content": ""}
    if isinstance(item, dict):
        payload.update(item)
    elif isinstance(item, str):
        payload["content"] = item
    return payload


PAYLOAD_BUILDERS: Dict[NodeKind, Callable[[Any], Dict[str, Any]]] = {
    NodeKind.APP_NAME: _app_name_payload,
    NodeKind.TAGLINE: _value_payload,
    NodeKind.CORE_PROBLEM: _core_problem_payload,
    NodeKind.MISSION: _mission_payload,
    NodeKind.VALUE_PROP: _value_prop_payload,
    NodeKind.PLATFORM: _value_payload,
    NodeKind.TECH_STACK: _tech_stack_payload,
    NodeKind.UI_STYLE: _value_payload,
    NodeKind.USER_PERSONA: _persona_payload,
    NodeKind.COMPETITOR: _competitor_payload,
    NodeKind.FEATURE_PACK: _feature_pack_payload,
    NodeKind.FEATURE: _feature_payload,
    NodeKind.FEATURE_DESCRIPTION: _value_payload,
    NodeKind.ARCHITECTURE_BLUEPRINT: _blueprint_payload,
    NodeKind.SCREEN: _screen_payload,
    NodeKind.USER_FLOW: _user_flow_payload,
    NodeKind.DATABASE_TABLE: _table_payload,
    NodeKind.API_ENDPOINTS: _api_endpoints_payload,
    NodeKind.ROUTE: _route_payload,
    NodeKind.DESIGN_SYSTEM: _value_payload,
    NodeKind.BRANDING: _branding_payload,
    NodeKind.LAYOUT: _layout_payload,
    NodeKind.AUTH_METHODS: _auth_methods_payload,
    NodeKind.USER_ROLES: _user_roles_payload,
    NodeKind.SECURITY_FEATURES: _security_features_payload,
    NodeKind.NOTE: _note_payload,
}


def payload_for(kind, item: Any) -> Dict[str, Any]:
    """Derived payload for `item`; an unknown kind yields an empty payload."""
    kind = parse_kind(kind)
    builder = PAYLOAD_BUILDERS.get(kind)
    if builder is None:
        return {}
    return builder(_coerce_item(kind, item))


# -------------------------
# Constructors
# -------------------------

def create_node(
    kind,
    item: Any,
    index: int = 0,
    existing_nodes: Iterable[Node] = (),
) -> Optional[Node]:
    """Build the node for one domain item, or None for an unknown kind."""
    kind = parse_kind(kind)
    if kind is None or kind not in KIND_STAGE:
        return None

    source_id = source_id_for(kind, item, index)
    size = default_size(kind)
    position = resolve(
        existing_nodes,
        size,
        kind,
        grid_anchor(kind, index),
        max_rings=PLACEMENT_MAX_RINGS,
    )

    return Node(
        id=node_id_for(kind, source_id),
        kind=kind,
        payload=payload_for(kind, item),
        position=position,
        size=size,
        provenance=Provenance(
            owner=KIND_STAGE[kind].value,
            source_id=source_id,
            generated=True,
        ),
    )


def create_user_node(
    kind,
    payload: Optional[Dict[str, Any]] = None,
    position: Optional[Position] = None,
    existing_nodes: Iterable[Node] = (),
    size: Optional[Size] = None,
) -> Optional[Node]:
    """A node created directly by the user: UUID id, owner "user"."""
    kind = parse_kind(kind)
    if kind is None:
        return None
    size = size or default_size(kind)
    if position is None:
        position = resolve(existing_nodes, size, kind, max_rings=PLACEMENT_MAX_RINGS)

    if kind == NodeKind.NOTE:
        node_payload = _note_payload(payload or {})
    else:
        node_payload = dict(payload or {})

    return Node(
        id=f"{kind.value}-{uuid.uuid4().hex}",
        kind=kind,
        payload=node_payload,
        position=position,
        size=size,
        provenance=Provenance(owner=USER_OWNER, generated=False),
    )


def create_app_name_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.APP_NAME, item, index, existing_nodes)


def create_tagline_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.TAGLINE, item, index, existing_nodes)


def create_core_problem_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.CORE_PROBLEM, item, index, existing_nodes)


def create_mission_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.MISSION, item, index, existing_nodes)


def create_value_prop_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.VALUE_PROP, item, index, existing_nodes)


def create_platform_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.PLATFORM, item, index, existing_nodes)


def create_tech_stack_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.TECH_STACK, item, index, existing_nodes)


def create_ui_style_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.UI_STYLE, item, index, existing_nodes)


def create_user_persona_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.USER_PERSONA, item, index, existing_nodes)


def create_competitor_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.COMPETITOR, item, index, existing_nodes)


def create_feature_pack_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.FEATURE_PACK, item, index, existing_nodes)


def create_feature_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.FEATURE, item, index, existing_nodes)


def create_feature_description_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.FEATURE_DESCRIPTION, item, index, existing_nodes)


def create_architecture_blueprint_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.ARCHITECTURE_BLUEPRINT, item, index, existing_nodes)


def create_screen_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.SCREEN, item, index, existing_nodes)


def create_user_flow_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.USER_FLOW, item, index, existing_nodes)


def create_database_table_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.DATABASE_TABLE, item, index, existing_nodes)


def create_api_endpoints_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.API_ENDPOINTS, item, index, existing_nodes)


def create_route_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.ROUTE, item, index, existing_nodes)


def create_design_system_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.DESIGN_SYSTEM, item, index, existing_nodes)


def create_branding_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.BRANDING, item, index, existing_nodes)


def create_layout_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.LAYOUT, item, index, existing_nodes)


def create_auth_methods_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.AUTH_METHODS, item, index, existing_nodes)


def create_user_roles_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.USER_ROLES, item, index, existing_nodes)


def create_security_features_node(item, index=0, existing_nodes=()):
    return create_node(NodeKind.SECURITY_FEATURES, item, index, existing_nodes)
