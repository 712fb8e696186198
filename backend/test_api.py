"""Tests for the canvas HTTP API"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from plancanvas.api.routes import registry
from plancanvas.db.models import Base
from plancanvas.db.session import get_db
from plancanvas.main import app

STAGES = {
    "ideation": {"appName": "Orbit", "tagline": "Plan in orbit"},
    "architecture": {
        "apiEndpoints": [{"method": "GET", "path": "/users"}],
        "sitemap": [{"path": "/settings"}],
    },
}


@pytest.fixture
def client():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    registry.clear()
    yield TestClient(app)
    app.dependency_overrides.clear()
    registry.clear()


def test_unknown_canvas_is_404(client):
    assert client.get("/canvas/nope").status_code == 404
    assert client.post("/canvas/nope/layout", json={}).status_code == 404


def test_stage_data_builds_the_graph(client):
    response = client.post("/canvas/p1/stages", json={"stage_data": STAGES})

    assert response.status_code == 200
    body = response.json()
    assert sorted(body["change"]["added"]) == ["apiEndpoints", "appName", "route:settings", "tagline"]
    assert {e["id"] for e in body["edges"]} == {"edge:appName->tagline", "edge:route:settings->apiEndpoints"}

    graph = client.get("/canvas/p1").json()
    assert graph["projectId"] == "p1"
    assert len(graph["nodes"]) == 4


def test_node_crud(client):
    client.post("/canvas/p1/stages", json={"stage_data": STAGES})

    created = client.post("/canvas/p1/nodes", json={
        "kind": "note",
        "payload": {"content": "remember"},
        "position": {"x": 10, "y": 20},
    })
    assert created.status_code == 201
    note = created.json()["node"]
    assert note["provenance"]["owner"] == "user"
    assert note["position"] == {"x": 10, "y": 20}

    patched = client.patch(f"/canvas/p1/nodes/{note['id']}", json={"payload": {"content": "done"}})
    assert patched.json()["node"]["payload"]["content"] == "done"
    assert patched.json()["projection"] is None

    assert client.delete(f"/canvas/p1/nodes/{note['id']}").status_code == 200
    assert client.delete(f"/canvas/p1/nodes/{note['id']}").status_code == 404


def test_unknown_kind_is_rejected(client):
    client.post("/canvas/p1/stages", json={"stage_data": STAGES})

    assert client.post("/canvas/p1/nodes", json={"kind": "spaceship"}).status_code == 422


def test_patch_projects_generated_node_edits(client):
    client.post("/canvas/p1/stages", json={"stage_data": STAGES})

    body = client.patch("/canvas/p1/nodes/appName", json={"payload": {"value": "Orbital"}}).json()

    assert body["projection"]["stage"] == "ideation"
    assert body["projection"]["record"]["appName"] == "Orbital"
    assert client.patch("/canvas/p1/nodes/ghost", json={"payload": {}}).status_code == 404


def test_edges(client):
    client.post("/canvas/p1/stages", json={"stage_data": STAGES})

    created = client.post("/canvas/p1/edges", json={"source": "tagline", "target": "route:settings"})
    assert created.json()["status"] == "created"
    edge_id = created.json()["edge"]["id"]

    duplicate = client.post("/canvas/p1/edges", json={"source": "tagline", "target": "route:settings"})
    assert duplicate.json() == {"status": "rejected", "edge": None}

    assert client.delete(f"/canvas/p1/edges/{edge_id}").status_code == 200
    assert client.delete(f"/canvas/p1/edges/{edge_id}").status_code == 404


def test_layout_and_validate(client):
    client.post("/canvas/p1/stages", json={"stage_data": STAGES})

    laid_out = client.post("/canvas/p1/layout", json={"algorithm": "radial", "ring_spacing": 150})
    assert laid_out.json()["status"] == "success"

    assert client.post("/canvas/p1/layout", json={"algorithm": "zigzag"}).status_code == 422

    report = client.post("/canvas/p1/validate").json()
    assert report["is_valid"]
    assert report["stats"]["nodes"] == 4


def test_replace_graph_normalises_input(client):
    response = client.put("/canvas/p2/graph", json={
        "nodes": [
            {"id": "a", "kind": "note"},
            {"id": "b", "kind": "note", "position": {"x": 300, "y": 0}},
            {"id": "c", "kind": "bogus"},
        ],
        "edges": [
            {"source": "a", "target": "b"},
            {"source": "a", "target": "c"},
        ],
    })

    body = response.json()
    assert [n["id"] for n in body["nodes"]] == ["a", "b"]
    assert [e["id"] for e in body["edges"]] == ["edge:a->b"]
    assert body["nodes"][0]["adjacency"] == ["b"]


def test_save_and_load_round_trip(client):
    client.post("/canvas/p1/stages", json={"stage_data": STAGES})
    original = client.get("/canvas/p1").json()

    assert client.post("/canvas/p1/save").json() == {"status": "saved", "projectId": "p1"}

    registry.clear()
    assert client.get("/canvas/p1").status_code == 404

    loaded = client.post("/canvas/p1/load").json()
    assert loaded["nodes"] == original["nodes"]
    assert loaded["edges"] == original["edges"]

    again = client.post("/canvas/p1/stages", json={"stage_data": STAGES}).json()
    assert not again["change"]["changed"]


def test_load_without_snapshot_is_404(client):
    assert client.post("/canvas/empty/load").status_code == 404
