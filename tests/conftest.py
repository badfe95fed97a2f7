"""Shared fixtures for tosan-oauth tests."""

import json
from typing import Any, Optional
from urllib.parse import parse_qsl

import httpx
import pytest

from tosan_oauth.config import TosanConfig


class FakeTosan:
    """In-memory Tosan token and accounts endpoints.

    Responses are configured per test; every request is recorded.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.token_status = 200
        self.token_body: Any = {
            "access_token": "access-abc",
            "refresh_token": "refresh-def",
            "expires_in": 3600,
            "scope": "accounts",
            "token_type": "bearer",
        }
        self.profile_status = 200
        self.profile_body: Any = {
            "accounts": [{"number": "1234-56-789", "currency": "IRR"}],
            "customer_name": "Sara Ahmadi",
        }
        self.raise_on: Optional[str] = None

    @staticmethod
    def _response(status: int, body: Any) -> httpx.Response:
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if self.raise_on == path:
            raise httpx.ConnectError("connection refused", request=request)
        if path == "/oauth/token":
            return self._response(self.token_status, self.token_body)
        if path == "/v1/accounts":
            return self._response(self.profile_status, self.profile_body)
        return httpx.Response(404, json={"error": "not_found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    @staticmethod
    def form(request: httpx.Request) -> dict[str, str]:
        return dict(parse_qsl(request.content.decode()))

    @staticmethod
    def json(request: httpx.Request) -> Any:
        return json.loads(request.content)


@pytest.fixture
def fake_tosan():
    """Fake Tosan backend."""
    return FakeTosan()


@pytest.fixture
def config():
    """Production (non-sandbox) configuration."""
    return TosanConfig(
        client_id="client-123",
        client_secret="secret-456",
        callback_url="https://www.example.net/auth/tosan/callback",
        device_id="device-1",
        boom_token="boom-xyz",
    )
