"""
Tests for the generation server — app factory, /generate, /health, CORS.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from flask.testing import FlaskClient

from tokenforge.core.config.settings import ServerSettings
from tokenforge.core.models.generation import GenerationResult
from tokenforge.core.services.on_demand import OnDemandGenerationService
from tokenforge.ui.web.routes_generate import to_response
from tokenforge.ui.web.server import SERVICE_KEY, create_app

BAD_TOKENS = {"colors/base.json": {"colors": {"primary": {"$type": "color", "$value": "nope"}}}}


@pytest.fixture()
def app(tmp_path: Path):
    """Create a test Flask app with its own generation service."""
    service = OnDemandGenerationService(scratch_root=tmp_path)
    settings = ServerSettings(environment="test", frontend_url="https://tokens.example.com")
    app = create_app(settings=settings, service=service)
    app.config["TESTING"] = True
    yield app
    service.close(timeout=5)


@pytest.fixture()
def client(app) -> FlaskClient:
    return app.test_client()


class TestAppFactory:
    """Tests for create_app()."""

    def test_service_registered(self, app):
        assert isinstance(app.extensions[SERVICE_KEY], OnDemandGenerationService)

    def test_default_service_uses_preview_generator(self):
        app = create_app(settings=ServerSettings(preview_generator="figma"))
        service = app.extensions[SERVICE_KEY]
        assert service.profile == ("figma",)
        service.close()


class TestHealth:
    """Tests for GET /health."""

    def test_health(self, client: FlaskClient):
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["status"] == "ok"
        assert data["environment"] == "test"
        assert "timestamp" in data


class TestGenerate:
    """Tests for POST /generate."""

    def test_success(self, client: FlaskClient, token_tree: dict):
        resp = client.post("/generate", json=token_tree)
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["success"] is True
        assert "--colors-primary: 59 130 246;" in data["baseCSS"]
        assert ".dark {" in data["darkCSS"]

    def test_failure_without_history(self, client: FlaskClient):
        resp = client.post("/generate", json=BAD_TOKENS)
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["success"] is False
        assert "colors.primary" in data["error"]["message"]
        assert "baseCSS" not in data

    def test_failure_serves_last_good(self, client: FlaskClient, token_tree: dict):
        good = client.post("/generate", json=token_tree).get_json()
        data = client.post("/generate", json=BAD_TOKENS).get_json()
        assert data["success"] is False
        assert data["baseCSS"] == good["baseCSS"]
        assert data["darkCSS"] == good["darkCSS"]

    @pytest.mark.parametrize("body", [[1, 2], "tokens", 3])
    def test_body_must_be_object(self, client: FlaskClient, body: object):
        resp = client.post("/generate", json=body)
        assert resp.status_code == 400
        data = resp.get_json()
        assert data["success"] is False
        assert "JSON object" in data["error"]["message"]

    def test_not_json(self, client: FlaskClient):
        resp = client.post("/generate", data="{broken", content_type="application/json")
        assert resp.status_code == 400

    def test_get_not_allowed(self, client: FlaskClient):
        assert client.get("/generate").status_code == 405


class TestCors:
    """Tests for CORS headers."""

    def test_local_origin_allowed(self, client: FlaskClient):
        resp = client.get("/health", headers={"Origin": "http://localhost:5173"})
        assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"

    def test_frontend_url_allowed(self, client: FlaskClient):
        resp = client.get("/health", headers={"Origin": "https://tokens.example.com"})
        assert resp.headers["Access-Control-Allow-Origin"] == "https://tokens.example.com"

    def test_other_origin_rejected(self, client: FlaskClient):
        resp = client.get("/health", headers={"Origin": "https://evil.example.com"})
        assert "Access-Control-Allow-Origin" not in resp.headers

    def test_preflight(self, client: FlaskClient):
        resp = client.options(
            "/generate",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert resp.status_code == 204
        assert "POST" in resp.headers["Access-Control-Allow-Methods"]


class TestToResponse:
    """Tests for the response shaping helper."""

    def test_success_shape(self):
        result = GenerationResult(
            success=True,
            artifacts={"tailwind/base.css": "a", "tailwind/dark.css": "b"},
        )
        assert to_response(result) == {"success": True, "baseCSS": "a", "darkCSS": "b"}

    def test_failure_shape(self):
        result = GenerationResult.failure("bad token")
        assert to_response(result) == {"success": False, "error": {"message": "bad token"}}
