"""
Exception hierarchy raised by :class:`task_client.api_client.ApiClient`.

The managers catch these at their boundary and translate them into a
``False`` result plus a notification, so view code never sees them.
"""

from __future__ import annotations

from typing import Any


class ClientError(Exception):
    """Base class for every failure raised by the API client."""


class TransportError(ClientError):
    """The request never produced an HTTP response (timeout, refused, DNS)."""


class ApiError(ClientError):
    """
    The API answered with an error status or ``success: false``.

    Attributes:
        message: The server-provided message (empty when the body had none).
        status_code: HTTP status of the response.
        payload: The decoded JSON body (empty dict when not JSON).
    """

    def __init__(self, message: str, status_code: int, payload: dict[str, Any] | None = None):
        super().__init__(message or f"HTTP {status_code}")
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}


class SessionExpiredError(ApiError):
    """An authenticated request was rejected with 401; the session was cleared."""
