"""Tests for projecting node edits back onto stage records"""

from plancanvas.factory import create_node, create_user_node
from plancanvas.ir import NodeKind
from plancanvas.pipeline import EditProjector, IdeationReconciler, StructureReconciler


def test_singleton_edit_patches_the_record_key():
    node = create_node(NodeKind.APP_NAME, "Orbit").with_payload({"value": "Orbital", "nameHistory": []})
    record = {"appName": "Orbit", "tagline": "Plan"}

    projected = EditProjector().project(node, record)

    assert projected == {"appName": "Orbital", "tagline": "Plan"}
    assert record == {"appName": "Orbit", "tagline": "Plan"}


def test_mission_edit_patches_both_fields():
    node = create_node(NodeKind.MISSION, {"appIdea": "Idea", "missionStatement": "Old"})
    node = node.with_payload({"value": "Idea", "missionStatement": "New"})

    projected = EditProjector().project(node, {})

    assert projected == {"appIdea": "Idea", "missionStatement": "New"}


def test_collection_edit_patches_the_matching_item():
    record = {"screens": [{"id": "home", "name": "Home"}, {"id": "cart", "name": "Cart"}]}
    node = create_node(NodeKind.SCREEN, record["screens"][1], index=1)
    node = node.with_payload({**node.payload, "description": "Checkout basket"})

    projected = EditProjector().project(node, record)

    assert projected["screens"][1]["description"] == "Checkout basket"
    assert projected["screens"][0] == {"id": "home", "name": "Home"}


def test_renamed_item_keeps_its_identity():
    record = {"userPersonas": [{"name": "Alice", "role": "PM"}]}
    reconciler = IdeationReconciler()
    nodes = reconciler.reconcile([], record, None)
    node = nodes[0].with_payload({**nodes[0].payload, "name": "Alicia"})

    projected = EditProjector().project(node, record)
    persona = projected["userPersonas"][0]

    assert persona == {"name": "Alicia", "role": "PM", "painPoint": "Pain point", "emoji": "👤", "id": "alice-pm"}
    # the echo maps back onto the same node
    echoed = reconciler.reconcile(nodes, projected, record)
    assert [n.id for n in echoed] == [node.id]
    assert echoed[0].payload["name"] == "Alicia"


def test_target_users_persona_updates_target_users():
    nodes = IdeationReconciler().reconcile([], {"targetUsers": "Founders"}, None)
    node = nodes[0].with_payload({**nodes[0].payload, "painPoint": "Busy founders"})

    projected = EditProjector().project(node, {"targetUsers": "Founders"})

    assert projected == {"targetUsers": "Busy founders"}


def test_no_projection_for_user_nodes_or_unknown_items():
    projector = EditProjector()
    note = create_user_node(NodeKind.NOTE, {"content": "mine"})
    assert projector.project(note, {"anything": 1}) is None

    flows = StructureReconciler().reconcile([], {"userFlows": [{"id": "f", "name": "Buy"}]}, None)
    assert projector.project(flows[0], {"userFlows": [{"id": "other", "name": "Sell"}]}) is None
    assert projector.project(flows[0], None) is None


def test_kinds_without_a_record_field_are_not_projected():
    node = create_node(NodeKind.FEATURE_PACK, "auth")

    assert EditProjector().project(node, {"selectedFeaturePacks": ["auth"]}) is None
