"""
Unit tests for how the web views reach the API.

Every request gets its own managers and API client.  Without an injected
transport the client calls ``requests.request`` directly, so no
``requests.Session`` (and no cookie jar) is shared between users.
"""

from __future__ import annotations

import pytest
import requests

from frontend_app import create_app
from frontend_app.routes.views import _client

pytestmark = pytest.mark.unit

USER = {"id": 1, "name": "Ada", "email": "ada@example.com", "role": "user"}


class _FakeResponse:
    def __init__(self, status_code: int, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


def test_default_transport_is_the_requests_module():
    app = create_app("testing")

    assert app.extensions["taskflow_http"] is requests


def test_each_request_builds_its_own_api_client():
    """Test that two requests never share a client or a requests.Session."""
    # Arrange
    app = create_app("testing")
    clients = []

    # Act
    for _ in range(2):
        with app.test_request_context("/dashboard"):
            auth, tasks = _client()
            assert auth.api is tasks.api
            clients.append(auth.api)

    # Assert
    assert clients[0] is not clients[1]
    assert not any(isinstance(client.http, requests.Session) for client in clients)


def test_default_transport_sends_one_off_requests(monkeypatch):
    """Test that API calls go through ``requests.request`` without a Session."""
    # Arrange
    calls = []

    def fake_request(**kwargs):
        calls.append(kwargs)
        return _FakeResponse(200, {"success": True, "user": USER})

    monkeypatch.setattr(requests, "request", fake_request)
    app = create_app("testing")

    # Act
    with app.test_request_context("/profile"):
        auth, _ = _client()
        payload = auth.api.get("/auth/me", authenticated=False)

    # Assert
    assert payload["user"] == USER
    assert len(calls) == 1
    assert calls[0]["method"] == "GET"
    assert calls[0]["url"].endswith("/auth/me")
