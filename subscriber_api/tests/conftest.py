"""Shared fixtures: test settings, signed tokens, proxy events and a fake MailerLite API."""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any

import httpx
import pytest

from subscriber_api.core.config import Settings
from subscriber_api.services.auth import issue_token
from subscriber_api.services.mailerlite import MailerLiteClient

JWT_SECRET = "test-secret-key-with-enough-length-for-hs256"
API_KEY = "test-api-key"


class FakeMailerLite:
    """Route table standing in for connect.mailerlite.com, used via httpx.MockTransport."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, status_code: int = 200, json_body: Any = None) -> None:
        self.routes[(method.upper(), path)] = (status_code, json_body)

    def fail(self, method: str, path: str, exc: Exception) -> None:
        self.routes[(method.upper(), path)] = exc

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and self._path(r) == path]

    @staticmethod
    def _path(request: httpx.Request) -> str:
        return request.url.path.removeprefix("/api")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, self._path(request)))
        if route is None:
            return httpx.Response(404, json={"message": "Resource not found"})
        if isinstance(route, Exception):
            raise route
        status_code, json_body = route
        return httpx.Response(status_code, json=json_body)


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        public_jwt_secret=JWT_SECRET,
        mailerlite_api_key=API_KEY,
        environment="test",
        app_version="9.9.9",
    )


@pytest.fixture
def fake_api() -> FakeMailerLite:
    return FakeMailerLite()


@pytest.fixture
def client(fake_api: FakeMailerLite) -> MailerLiteClient:
    http_client = httpx.Client(transport=httpx.MockTransport(fake_api))
    with MailerLiteClient(API_KEY, http_client=http_client) as mailerlite:
        yield mailerlite


@pytest.fixture
def token() -> str:
    return issue_token(JWT_SECRET, {"userId": "demo-user"})


@pytest.fixture
def lambda_context() -> SimpleNamespace:
    return SimpleNamespace(aws_request_id="test-request-id")


@pytest.fixture
def make_event(token: str):
    def _make_event(
        body: Any = None,
        *,
        auth: str | None = "default",
        raw_body: str | None = None,
        path_parameters: dict[str, str] | None = None,
        source_ip: str = "203.0.113.7",
    ) -> dict[str, Any]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if auth == "default":
            headers["Authorization"] = f"Bearer {token}"
        elif auth is not None:
            headers["Authorization"] = auth

        if raw_body is None and body is not None:
            raw_body = json.dumps(body)

        return {
            "headers": headers,
            "body": raw_body,
            "pathParameters": path_parameters,
            "requestContext": {"identity": {"sourceIp": source_ip}},
        }

    return _make_event
