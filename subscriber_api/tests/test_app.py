"""Tests for the local FastAPI adapter around the Lambda handlers."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from subscriber_api.core.config import Settings
from subscriber_api.main import create_app
from subscriber_api.routers import endpoints


@pytest.fixture
def app_client(settings: Settings, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    monkeypatch.setattr(endpoints, "get_settings", lambda: settings)
    return TestClient(create_app())


def test_health_route_returns_handler_payload(app_client: TestClient):
    response = app_client.get("/health")

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.json()["status"] == "healthy"
    assert response.json()["environment"] == "test"


def test_register_route_requires_token(app_client: TestClient):
    response = app_client.post("/register", json={"email": "test@example.com"})

    assert response.status_code == 401
    assert response.json()["message"] == "Authentication token is required"


def test_join_group_route_validates_payload(app_client: TestClient, token: str):
    response = app_client.post(
        "/join-group",
        json={"email": "nope"},
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Please provide a valid email address, Group name is required"


def test_unsubscribe_route_passes_path_id(app_client: TestClient, token: str, monkeypatch: pytest.MonkeyPatch):
    seen = {}

    def fake_handle(event, context, *, settings):
        seen["id"] = event["pathParameters"]["id"]
        seen["request_id"] = context.aws_request_id
        return {"statusCode": 200, "headers": {"Content-Type": "application/json"}, "body": "{}"}

    monkeypatch.setattr(endpoints.user_unsubscribe, "handle", fake_handle)

    response = app_client.post("/unsubscribe/subscriber-123", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert seen["id"] == "subscriber-123"
    assert seen["request_id"]


def test_only_handler_routes_are_mounted(app_client: TestClient):
    response = app_client.get("/healthz")

    assert response.status_code == 404
