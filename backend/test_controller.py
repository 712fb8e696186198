"""Tests for the sync controller that runs every stage reconciler against the store"""

from plancanvas.factory import create_user_node
from plancanvas.graph import GraphStore
from plancanvas.ir import NodeKind, Position, StageId
from plancanvas.pipeline import (
    CanvasSyncController,
    FeatureReconciler,
    IdeationReconciler,
    StructureReconciler,
)


class ReentrantIdeation(IdeationReconciler):
    """Calls back into the controller mid-pass, the way an event echo would."""

    def __init__(self, follow_up):
        self.follow_up = follow_up
        self.controller = None
        self.nested_change = None

    def entities(self, data):
        if self.follow_up is not None:
            follow_up, self.follow_up = self.follow_up, None
            self.nested_change = self.controller.process(follow_up)
        return super().entities(data)


class RogueFeatures(FeatureReconciler):
    """Rewrites every node it is handed, including ones it does not own."""

    def reconcile(self, current_nodes, new_stage_data, last_stage_data):
        return [n.with_payload({"hacked": True}) for n in current_nodes]


def test_process_builds_the_canvas_and_reports_changes():
    store = GraphStore()
    controller = CanvasSyncController(store)

    change = controller.process({
        "ideation": {"appName": "Orbit", "tagline": "Plan in orbit"},
        "features": {"selectedFeaturePacks": ["auth"]},
    })

    assert sorted(change.added) == ["appName", "featurePack:auth", "tagline"]
    assert change.edges_added == ["edge:appName->tagline"]
    assert store.get_node("tagline").adjacency == frozenset({"appName"})


def test_same_data_twice_changes_nothing():
    store = GraphStore()
    controller = CanvasSyncController(store)
    data = {"ideation": {"appName": "Orbit"}}
    controller.process(data)
    node = store.get_node("appName")
    version = store.version

    change = controller.process(data)

    assert not change.changed
    assert store.get_node("appName") is node
    assert store.version == version


def test_absent_stages_are_left_alone():
    store = GraphStore()
    controller = CanvasSyncController(store)
    controller.process({"ideation": {"appName": "Orbit"}})

    controller.process({"features": {"selectedFeaturePacks": ["social"]}})

    assert "appName" in store
    assert "featurePack:social" in store


def test_long_stage_names_and_unknown_stages():
    store = GraphStore()
    controller = CanvasSyncController(store)

    controller.process({"ideation-discovery": {"appName": "Orbit"}, "mystery": {"x": 1}})

    assert [n.id for n in store.nodes] == ["appName"]
    assert StageId.IDEATION in controller.last_processed


def test_last_processed_is_a_snapshot_of_the_input():
    store = GraphStore()
    controller = CanvasSyncController(store)
    data = {"ideation": {"appName": "Orbit"}}
    controller.process(data)

    data["ideation"]["appName"] = "Orbital"
    controller.process(data)

    assert store.get_node("appName").payload["value"] == "Orbital"


def test_reentrant_call_is_queued_and_drained():
    reconciler = ReentrantIdeation({"ideation": {"appName": "Orbital"}})
    store = GraphStore()
    controller = CanvasSyncController(store, [reconciler])
    reconciler.controller = controller

    change = controller.process({"ideation": {"appName": "Orbit"}})

    assert reconciler.nested_change.queued
    assert not controller.processing
    assert change.added == ["appName"]
    assert store.get_node("appName").payload == {"value": "Orbital", "nameHistory": ["Orbit"]}


def test_ownership_guard_restores_foreign_nodes():
    store = GraphStore()
    note = create_user_node(NodeKind.NOTE, {"content": "mine"}, Position(0, 0))
    store.add_node(note)
    controller = CanvasSyncController(store, [IdeationReconciler(), RogueFeatures()])

    controller.process({
        "ideation": {"appName": "Orbit"},
        "features": {"selectedFeaturePacks": ["auth"]},
    })

    assert store.get_node(note.id).payload == {"title": "Note", "content": "mine"}
    assert store.get_node("appName").payload["value"] == "Orbit"


def test_removed_node_takes_its_edges_along():
    store = GraphStore()
    controller = CanvasSyncController(store)
    controller.process({"ideation": {"appName": "Orbit", "tagline": "Plan in orbit"}})

    change = controller.process({"ideation": {"appName": "Orbit"}})

    assert change.removed == ["tagline"]
    assert change.edges_removed == ["edge:appName->tagline"]
    assert store.get_node("appName").adjacency == frozenset()


def test_stale_auto_links_are_removed():
    store = GraphStore()
    controller = CanvasSyncController(store, [StructureReconciler()])
    screens = [{"id": "home", "name": "Home"}]

    controller.process({"structure": {
        "screens": screens,
        "userFlows": [{"id": "f", "name": "Browse", "steps": ["Open home"]}],
    }})
    assert store.has_edge_between("userFlow:f", "screen:home")

    controller.process({"structure": {
        "screens": screens,
        "userFlows": [{"id": "f", "name": "Browse", "steps": ["Close app"]}],
    }})
    assert not store.has_edge_between("userFlow:f", "screen:home")
    assert "screen:home" in store


def test_user_edges_between_generated_nodes_survive():
    store = GraphStore()
    controller = CanvasSyncController(store)
    controller.process({"ideation": {"appName": "Orbit", "platform": "web"}})
    edge = store.add_edge("platform", "appName")

    controller.process({"ideation": {"appName": "Orbit", "platform": "mobile"}})

    assert store.get_edge(edge.id) == edge


def test_before_pass_hook_runs_every_pass():
    calls = []
    controller = CanvasSyncController(GraphStore())
    controller.before_pass = lambda: calls.append(True)

    controller.process({"ideation": {"appName": "Orbit"}})
    controller.process({"ideation": {"appName": "Orbital"}})

    assert len(calls) == 2


def test_reset_forgets_processed_data():
    store = GraphStore()
    controller = CanvasSyncController(store)
    controller.process({"ideation": {"appName": "Orbit"}})

    controller.reset()

    assert controller.last_processed == {}
