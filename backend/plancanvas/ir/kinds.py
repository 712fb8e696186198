from enum import Enum
from typing import Dict, Optional


class StageId(str, Enum):
    IDEATION = "ideation"
    FEATURES = "features"
    STRUCTURE = "structure"
    ARCHITECTURE = "architecture"
    INTERFACE = "interface"
    AUTH = "auth"


USER_OWNER = "user"

# Long stage identifiers used by the planning assistant
STAGE_ALIASES: Dict[str, StageId] = {
    "ideation-discovery": StageId.IDEATION,
    "feature-planning": StageId.FEATURES,
    "structure-flow": StageId.STRUCTURE,
    "architecture-design": StageId.ARCHITECTURE,
    "interface-interaction": StageId.INTERFACE,
    "user-auth-flow": StageId.AUTH,
}

STAGE_ORDER = [
    StageId.IDEATION,
    StageId.FEATURES,
    StageId.STRUCTURE,
    StageId.ARCHITECTURE,
    StageId.INTERFACE,
    StageId.AUTH,
]


def normalize_stage_id(value) -> Optional[StageId]:
    """Map a short or long stage identifier onto StageId, None if unknown."""
    if isinstance(value, StageId):
        return value
    if not isinstance(value, str):
        return None
    key = value.strip()
    if key in STAGE_ALIASES:
        return STAGE_ALIASES[key]
    try:
        return StageId(key)
    except ValueError:
        return None


class NodeKind(str, Enum):
    # ideation
    APP_NAME = "appName"
    TAGLINE = "tagline"
    CORE_PROBLEM = "coreProblem"
    MISSION = "mission"
    VALUE_PROP = "valueProp"
    PLATFORM = "platform"
    TECH_STACK = "techStack"
    UI_STYLE = "uiStyle"
    USER_PERSONA = "userPersona"
    COMPETITOR = "competitor"

    # features
    FEATURE_PACK = "featurePack"
    FEATURE = "feature"
    FEATURE_DESCRIPTION = "featureDescription"
    ARCHITECTURE_BLUEPRINT = "architectureBlueprint"

    # structure
    SCREEN = "screen"
    USER_FLOW = "userFlow"

    # architecture
    DATABASE_TABLE = "databaseTable"
    API_ENDPOINTS = "apiEndpoints"
    ROUTE = "route"

    # interface
    DESIGN_SYSTEM = "designSystem"
    BRANDING = "branding"
    LAYOUT = "layout"

    # auth
    AUTH_METHODS = "authMethods"
    USER_ROLES = "userRoles"
    SECURITY_FEATURES = "securityFeatures"

    # freeform
    NOTE = "note"


COLLECTION_KINDS = frozenset({
    NodeKind.USER_PERSONA,
    NodeKind.COMPETITOR,
    NodeKind.FEATURE_PACK,
    NodeKind.FEATURE,
    NodeKind.SCREEN,
    NodeKind.USER_FLOW,
    NodeKind.DATABASE_TABLE,
    NodeKind.ROUTE,
})

FREEFORM_KINDS = frozenset({NodeKind.NOTE})

SINGLETON_KINDS = frozenset(
    kind for kind in NodeKind
    if kind not in COLLECTION_KINDS and kind not in FREEFORM_KINDS
)

KIND_STAGE: Dict[NodeKind, StageId] = {
    NodeKind.APP_NAME: StageId.IDEATION,
    NodeKind.TAGLINE: StageId.IDEATION,
    NodeKind.CORE_PROBLEM: StageId.IDEATION,
    NodeKind.MISSION: StageId.IDEATION,
    NodeKind.VALUE_PROP: StageId.IDEATION,
    NodeKind.PLATFORM: StageId.IDEATION,
    NodeKind.TECH_STACK: StageId.IDEATION,
    NodeKind.UI_STYLE: StageId.IDEATION,
    NodeKind.USER_PERSONA: StageId.IDEATION,
    NodeKind.COMPETITOR: StageId.IDEATION,
    NodeKind.FEATURE_PACK: StageId.FEATURES,
    NodeKind.FEATURE: StageId.FEATURES,
    NodeKind.FEATURE_DESCRIPTION: StageId.FEATURES,
    NodeKind.ARCHITECTURE_BLUEPRINT: StageId.FEATURES,
    NodeKind.SCREEN: StageId.STRUCTURE,
    NodeKind.USER_FLOW: StageId.STRUCTURE,
    NodeKind.DATABASE_TABLE: StageId.ARCHITECTURE,
    NodeKind.API_ENDPOINTS: StageId.ARCHITECTURE,
    NodeKind.ROUTE: StageId.ARCHITECTURE,
    NodeKind.DESIGN_SYSTEM: StageId.INTERFACE,
    NodeKind.BRANDING: StageId.INTERFACE,
    NodeKind.LAYOUT: StageId.INTERFACE,
    NodeKind.AUTH_METHODS: StageId.AUTH,
    NodeKind.USER_ROLES: StageId.AUTH,
    NodeKind.SECURITY_FEATURES: StageId.AUTH,
}

# Layer order used by the hierarchical layout when grouping by kind
KIND_ORDER = list(NodeKind)


def parse_kind(value) -> Optional[NodeKind]:
    if isinstance(value, NodeKind):
        return value
    try:
        return NodeKind(value)
    except (ValueError, TypeError):
        return None


class EdgeKind(str, Enum):
    REFERENCE = "reference"
    DEPENDENCY = "dependency"
    FLOW = "flow"
