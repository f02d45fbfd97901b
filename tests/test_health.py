"""Smoke tests for the health endpoints and the app shell."""
from __future__ import annotations

from salon_api import create_app
from salon_api.config import TestingConfig


def test_health_endpoint() -> None:
    app = create_app(TestingConfig)
    client = app.test_client()

    response = client.get("/health")

    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "OK"
    assert body["environment"] == "testing"
    assert "timestamp" in body


def test_db_health_ok(client) -> None:
    response = client.get("/db-health")

    assert response.status_code == 200
    assert response.get_json() == {"database": "ok"}


def test_root_lists_endpoints(client) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.get_json()["endpoints"]["docs"] == "/api-docs/"


def test_unknown_route_returns_json_404(client) -> None:
    response = client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.get_json() == {"success": False, "message": "Route not found"}


def test_method_not_allowed(client) -> None:
    response = client.delete("/api/categories")

    assert response.status_code == 405
    assert response.get_json()["message"] == "Method not allowed"


def test_api_spec_is_served(client) -> None:
    response = client.get("/apispec_1.json")

    assert response.status_code == 200
    assert "/api/bookings" in response.get_json()["paths"]


def test_mapping_config_overrides_defaults() -> None:
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "SQLALCHEMY_ENGINE_OPTIONS": {},
        "ENV_NAME": "staging",
        "RATELIMIT_ENABLED": False,
    })

    assert app.config["ENV_NAME"] == "staging"
    assert app.config["JWT_ACCESS_EXPIRES_IN"] == "15m"
