"""Tests for the HTTP service."""

import json

import pytest
from fastapi.testclient import TestClient

from shape_engine.config import EngineSettings
from shape_engine.service import create_app


@pytest.fixture(scope="module")
def client():
    with TestClient(create_app(EngineSettings())) as c:
        yield c


class TestShapeEndpoints:
    """Tests for palette, search and definition lookups."""

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "shapes": 38}

    def test_palette(self, client):
        data = client.get("/api/shapes").json()
        assert set(data["categories"]) == {
            "basic", "flowchart", "network", "uml", "containers", "arrows", "text",
        }
        assert data["stats"]["totalShapes"] == 38

    def test_search(self, client):
        data = client.get("/api/shapes/search", params={"q": "database"}).json()
        assert data["results"][0]["type"] == "network-database"
        assert data["results"][0]["category"] == "network"

    def test_search_requires_query(self, client):
        assert client.get("/api/shapes/search").status_code == 422

    def test_definition(self, client):
        data = client.get("/api/shapes/basic-star").json()
        assert data["name"] == "Star"
        assert data["behavior"] == "star"

    def test_unknown_definition(self, client):
        response = client.get("/api/shapes/unknown")
        assert response.status_code == 404
        assert response.json()["detail"] == "Shape type 'unknown' is not registered"


class TestInstances:
    """Tests for instance creation."""

    def test_create_instance(self, client):
        response = client.post(
            "/api/shapes/flowchart-process/instances",
            json={"overrides": {"x": 10, "y": 20, "label": "Step 1"}},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["shape"]["label"] == "Step 1"
        assert data["bounds"]["x"] == 10
        assert data["render"]["d"].startswith("M10,20")
        assert len(data["render"]["handles"]) == 8
        assert data["render"]["ports"]

    def test_create_with_empty_body_uses_defaults(self, client):
        data = client.post("/api/shapes/basic-circle/instances", json={}).json()
        assert data["shape"]["width"] == 80

    def test_create_unknown_type(self, client):
        response = client.post("/api/shapes/nope/instances", json={})
        assert response.status_code == 404

    def test_hit_test(self, client):
        body = {"overrides": {"x": 0, "y": 0, "width": 100, "height": 60}, "x": 90, "y": 30}
        data = client.post("/api/shapes/basic-diamond/hit-test", json=body).json()
        assert data["contains"] is True
        assert data["port"]["id"] == "right"
        assert data["handle"] is None

    def test_hit_test_on_handle(self, client):
        body = {"overrides": {"x": 0, "y": 0, "width": 100, "height": 60}, "x": 2, "y": 2}
        data = client.post("/api/shapes/basic-diamond/hit-test", json=body).json()
        assert data["contains"] is False
        assert data["handle"]["id"] == "nw"

    def test_invalid_override(self, client):
        response = client.post(
            "/api/shapes/basic-rectangle/instances", json={"overrides": {"width": "wide"}}
        )
        assert response.status_code == 422


class TestEngineEndpoints:
    """Tests for validation, resize and routing."""

    def test_validate(self, client):
        config = {"id": "my-shape", "name": "Mine", "category": "basic"}
        data = client.post("/api/validate", json={"config": config, "typeId": "other"}).json()
        assert data["valid"] is True
        assert "Type 'other' does not match config id 'my-shape'" in data["warnings"]

    def test_validate_invalid(self, client):
        data = client.post("/api/validate", json={"config": {"name": "X", "category": "basic"}}).json()
        assert data["valid"] is False
        assert data["errors"] == ["Missing required field: id"]

    def test_validate_malformed_values(self, client):
        config = {"id": "bad", "name": "Bad", "category": ["basic"], "handles": {"positions": [["nw"]]}}
        response = client.post("/api/validate", json={"config": config})
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is False
        assert "category must be a string" in data["errors"]
        assert "Invalid handle ID: ['nw']" in data["errors"]

    def test_resize(self, client):
        body = {
            "bounds": {"x": 0, "y": 0, "width": 100, "height": 100},
            "handle": "se",
            "dx": 10,
            "dy": 10,
        }
        data = client.post("/api/resize", json=body).json()
        assert data["bounds"]["width"] == 110
        assert data["bounds"]["right"] == 110

    def test_resize_with_options(self, client):
        body = {
            "bounds": {"x": 13, "y": 7, "width": 42, "height": 58},
            "handle": "se",
            "options": {"snapToGrid": True, "gridSize": 10},
        }
        bounds = client.post("/api/resize", json=body).json()["bounds"]
        assert (bounds["x"], bounds["y"], bounds["width"], bounds["height"]) == (10, 10, 40, 60)

    def test_resize_unknown_handle(self, client):
        body = {"bounds": {"x": 0, "y": 0, "width": 10, "height": 10}, "handle": "zz"}
        assert client.post("/api/resize", json=body).json() == {"bounds": None}

    def test_connection_path(self, client):
        body = {
            "source": {"id": "a", "x": 0, "y": 0},
            "target": {"id": "b", "x": 100, "y": 50},
            "style": "straight",
        }
        data = client.post("/api/connections/path", json=body).json()
        assert data["d"] == "M0,0 L100,50"
        assert [s["command"] for s in data["segments"]] == ["M", "L"]

    def test_loader_status(self, client):
        data = client.get("/api/loader").json()
        assert data["stats"]["loaded"] == 38
        assert data["failed"] == []


class TestLibraryPath:
    """Tests for loading an extra directory at startup."""

    def test_extra_directory(self, tmp_path, sample_config):
        config = dict(sample_config, id="extra-box", behavior="shape_engine.library.basic:RECTANGLE")
        (tmp_path / "extra-box.json").write_text(json.dumps(config), encoding="utf-8")

        settings = EngineSettings(library_path=str(tmp_path))
        with TestClient(create_app(settings)) as client:
            assert client.get("/api/health").json()["shapes"] == 39
            assert client.get("/api/shapes/extra-box").status_code == 200
