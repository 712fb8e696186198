"""Tests for the per-kind node constructors"""

from plancanvas.factory import (
    DEFAULT_SUB_FEATURES,
    create_node,
    create_user_node,
    node_id_for,
    payload_for,
    source_id_for,
)
from plancanvas.factory.node_factory import (
    create_app_name_node,
    create_feature_pack_node,
    create_user_persona_node,
)
from plancanvas.ir import NodeKind, Position
from plancanvas.placement import default_anchor, default_size, find_overlaps


def test_singleton_node_has_fixed_id_and_stage_owner():
    node = create_app_name_node("Orbit")

    assert node.id == "appName"
    assert node.kind == NodeKind.APP_NAME
    assert node.payload == {"value": "Orbit", "nameHistory": []}
    assert node.owner == "ideation"
    assert node.provenance.generated
    assert node.provenance.source_id is None
    assert node.position == default_anchor(NodeKind.APP_NAME)
    assert node.size == default_size(NodeKind.APP_NAME)


def test_collection_id_prefers_item_id():
    item = {"id": "p1", "name": "Alice", "role": "Designer"}

    assert source_id_for(NodeKind.USER_PERSONA, item) == "p1"
    assert create_user_persona_node(item).id == "userPersona:p1"


def test_collection_id_falls_back_to_natural_key_then_index():
    assert source_id_for(NodeKind.USER_PERSONA, {"name": "Alice", "role": "Lead Designer"}) == "alice-lead-designer"
    assert source_id_for(NodeKind.ROUTE, {"path": "/settings/profile"}) == "settings-profile"
    assert source_id_for(NodeKind.SCREEN, {"description": "no name"}, index=3) == "3"


def test_singleton_kinds_have_no_source_id():
    assert source_id_for(NodeKind.TAGLINE, "Ship faster") is None
    assert node_id_for(NodeKind.TAGLINE) == "tagline"


def test_persona_defaults_for_missing_fields():
    node = create_user_persona_node({"id": "p9"})

    assert node.payload == {
        "name": "User Persona",
        "role": "Role",
        "painPoint": "Pain point",
        "emoji": "👤",
    }


def test_feature_pack_gets_title_and_default_sub_features():
    node = create_feature_pack_node("auth")

    assert node.id == "featurePack:auth"
    assert node.payload["title"] == "Authentication & Users"
    assert node.payload["subFeatures"] == DEFAULT_SUB_FEATURES["auth"]


def test_unknown_feature_pack_is_title_cased_without_sub_features():
    payload = payload_for(NodeKind.FEATURE_PACK, "gaming")

    assert payload["title"] == "Gaming"
    assert payload["subFeatures"] == []


def test_malformed_item_fields_fall_back_to_defaults():
    node = create_node(NodeKind.SCREEN, {"id": "s1", "name": 42, "type": ["bad"]})

    assert node.payload["name"] == "Screen"
    assert node.payload["type"] == "page"


def test_wrong_item_type_does_not_raise():
    assert payload_for(NodeKind.DATABASE_TABLE, "not a table")["name"] == "table"
    assert payload_for(NodeKind.API_ENDPOINTS, {"oops": 1}) == {"endpoints": [], "count": 0}


def test_constructor_avoids_existing_nodes():
    first = create_node(NodeKind.APP_NAME, "Orbit")
    blocked = create_node(NodeKind.TAGLINE, "Ship faster", existing_nodes=[first])

    assert not find_overlaps([first], blocked.position, blocked.size, 30)


def test_collection_items_fill_a_grid():
    first = create_node(NodeKind.SCREEN, {"id": "a", "name": "Home"}, index=0)
    second = create_node(NodeKind.SCREEN, {"id": "b", "name": "Settings"}, index=1)

    assert second.position.y == first.position.y
    assert second.position.x > first.position.x


def test_inputs_are_not_mutated():
    item = {"name": "Users", "fields": [{"name": "id", "type": "uuid"}]}
    create_node(NodeKind.DATABASE_TABLE, item)

    assert item == {"name": "Users", "fields": [{"name": "id", "type": "uuid"}]}


def test_unknown_kind_returns_none():
    assert create_node("spaceship", {}) is None
    assert create_user_node("spaceship") is None


def test_user_node_gets_unique_id_and_user_owner():
    a = create_user_node(NodeKind.NOTE, {"content": "remember"}, Position(5, 5))
    b = create_user_node(NodeKind.NOTE, {"content": "remember"}, Position(5, 5))

    assert a.id != b.id
    assert a.id.startswith("note-")
    assert a.owner == "user"
    assert not a.provenance.generated
    assert a.payload == {"title": "Note", "content": "remember"}
    assert a.position == Position(5, 5)
