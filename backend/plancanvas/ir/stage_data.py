"""
Boundary models for incoming stage data.

Stage data arrives from an external producer and may be partial or
malformed. Every field is lenient: a value that fails validation is read as
absent, and a malformed item inside a collection is dropped on its own
without discarding its siblings.
"""

from typing import Annotated, Any, List, Optional, Type, TypeVar

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    WrapValidator,
)
from pydantic.alias_generators import to_camel


# -------------------------
# Lenient field types
# -------------------------

def _text_or_none(value, handler):
    if value is None:
        return None
    try:
        text = handler(value)
    except ValidationError:
        return None
    if text is None:
        return None
    text = text.strip()
    return text or None


def _none_on_error(value, handler):
    try:
        return handler(value)
    except ValidationError:
        return None


def _optional_items(value, handler):
    if not isinstance(value, (list, tuple)):
        return None
    return _drop_invalid_items(value, handler)


def _drop_invalid_items(value, handler):
    if not isinstance(value, (list, tuple)):
        return []
    items = []
    for item in value:
        try:
            items.extend(handler([item]))
        except ValidationError:
            continue
    return items


def _id_or_none(value, handler):
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    return _text_or_none(value, handler)


def _false_on_error(value, handler):
    try:
        return handler(value)
    except ValidationError:
        return False


Text = Annotated[Optional[str], WrapValidator(_text_or_none)]
Flag = Annotated[bool, WrapValidator(_false_on_error)]
TextList = Annotated[List[str], WrapValidator(_drop_invalid_items)]
ItemId = Annotated[Optional[str], WrapValidator(_id_or_none)]


class StageModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ItemModel(StageModel):
    id: ItemId = None

    def natural_key(self) -> Optional[str]:
        return None


# -------------------------
# Ideation
# -------------------------

class Persona(ItemModel):
    name: Text = None
    role: Text = None
    pain_point: Text = None
    emoji: Text = None

    def natural_key(self) -> Optional[str]:
        if not self.name:
            return None
        return f"{self.name}-{self.role}" if self.role else self.name


class Competitor(ItemModel):
    name: Text = None
    notes: Text = None
    link: Text = None
    domain: Text = None
    tagline: Text = None
    features: TextList = Field(default_factory=list)
    pricing_tiers: Annotated[List[Any], WrapValidator(_drop_invalid_items)] = Field(default_factory=list)
    market_positioning: Text = None
    strengths: TextList = Field(default_factory=list)
    weaknesses: TextList = Field(default_factory=list)

    def natural_key(self) -> Optional[str]:
        return self.name


class IdeationData(StageModel):
    app_name: Text = None
    tagline: Text = None
    problem_statement: Text = None
    app_idea: Text = None
    mission_statement: Text = None
    value_proposition: Text = None
    platform: Text = None
    tech_stack: TextList = Field(default_factory=list)
    ui_style: Text = None
    target_users: Text = None
    user_personas: Annotated[Optional[List[Persona]], WrapValidator(_optional_items)] = Field(
        default=None,
        validation_alias=AliasChoices("userPersonas", "personas", "user_personas"),
    )
    competitors: Annotated[List[Competitor], WrapValidator(_drop_invalid_items)] = Field(
        default_factory=list,
        validation_alias=AliasChoices("competitorData", "competitors"),
    )


# -------------------------
# Feature planning
# -------------------------

class CustomFeature(ItemModel):
    name: Text = None
    description: Text = None
    priority: Text = None
    complexity: Text = None
    category: Text = None
    sub_features: TextList = Field(default_factory=list)

    def natural_key(self) -> Optional[str]:
        return self.name


class ArchitecturePrep(StageModel):
    screens: Annotated[List[Any], WrapValidator(_drop_invalid_items)] = Field(default_factory=list)
    api_routes: Annotated[List[Any], WrapValidator(_drop_invalid_items)] = Field(default_factory=list)
    components: Annotated[List[Any], WrapValidator(_drop_invalid_items)] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.screens or self.api_routes or self.components)


class FeatureData(StageModel):
    selected_feature_packs: TextList = Field(default_factory=list)
    custom_features: Annotated[List[CustomFeature], WrapValidator(_drop_invalid_items)] = Field(default_factory=list)
    natural_language_features: Text = None
    architecture_prep: Annotated[Optional[ArchitecturePrep], WrapValidator(_none_on_error)] = None


# -------------------------
# Structure & flow
# -------------------------

class Screen(ItemModel):
    name: Text = None
    type: Text = None
    description: Text = None

    def natural_key(self) -> Optional[str]:
        return self.name


class UserFlow(ItemModel):
    name: Text = None
    steps: TextList = Field(default_factory=list)

    def natural_key(self) -> Optional[str]:
        return self.name


class StructureData(StageModel):
    screens: Annotated[List[Screen], WrapValidator(_drop_invalid_items)] = Field(default_factory=list)
    user_flows: Annotated[List[UserFlow], WrapValidator(_drop_invalid_items)] = Field(default_factory=list)


# -------------------------
# Architecture design
# -------------------------

class TableField(StageModel):
    name: Text = None
    type: Text = None


class DatabaseTable(ItemModel):
    name: Text = None
    fields: Annotated[List[TableField], WrapValidator(_drop_invalid_items)] = Field(default_factory=list)

    def natural_key(self) -> Optional[str]:
        return self.name


class ApiEndpoint(StageModel):
    method: Text = None
    path: Text = None
    description: Text = None


class Route(ItemModel):
    path: Text = None
    component: Text = None
    protected: Flag = False
    description: Text = None

    def natural_key(self) -> Optional[str]:
        return self.path


class ArchitectureData(StageModel):
    database_schema: Annotated[List[DatabaseTable], WrapValidator(_drop_invalid_items)] = Field(default_factory=list)
    api_endpoints: Annotated[List[ApiEndpoint], WrapValidator(_drop_invalid_items)] = Field(default_factory=list)
    sitemap: Annotated[List[Route], WrapValidator(_drop_invalid_items)] = Field(default_factory=list)


# -------------------------
# Interface & interaction
# -------------------------

class Branding(StageModel):
    primary_color: Text = None
    secondary_color: Text = None
    font_family: Text = None
    border_radius: Text = None


class LayoutBlock(StageModel):
    type: Text = None


class InterfaceData(StageModel):
    selected_design_system: Text = None
    custom_branding: Annotated[Optional[Branding], WrapValidator(_none_on_error)] = None
    layout_blocks: Annotated[List[LayoutBlock], WrapValidator(_drop_invalid_items)] = Field(default_factory=list)


# -------------------------
# Auth
# -------------------------

class AuthMethod(ItemModel):
    name: Text = None
    enabled: Flag = False


class UserRole(ItemModel):
    name: Text = None
    description: Text = None


class SecurityFeature(ItemModel):
    name: Text = None
    enabled: Flag = False


class AuthData(StageModel):
    auth_methods: Annotated[List[AuthMethod], WrapValidator(_drop_invalid_items)] = Field(default_factory=list)
    user_roles: Annotated[List[UserRole], WrapValidator(_drop_invalid_items)] = Field(default_factory=list)
    security_features: Annotated[List[SecurityFeature], WrapValidator(_drop_invalid_items)] = Field(default_factory=list)


ModelT = TypeVar("ModelT", bound=StageModel)


def parse_stage_data(model: Type[ModelT], raw: Any) -> ModelT:
    """Validate raw stage data, reading anything unusable as absent."""
    if isinstance(raw, BaseModel):
        raw = raw.model_dump(by_alias=True)
    if not isinstance(raw, dict):
        return model()
    try:
        return model.model_validate(raw)
    except ValidationError:
        return model()
