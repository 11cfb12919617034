"""
HTTP client for the Taskflow API.

One ``requests.Session`` bound to a base URL.  Credentials are not added by
hidden middleware: the client is handed the :class:`SessionStore` it reads
the token from, each call says whether it is authenticated, and
``_auth_headers`` is the single place a token is turned into a header.

Responses are reduced to their decoded JSON payload.  Anything else becomes
an exception from :mod:`task_client.exceptions`:

* no HTTP response at all            -> ``TransportError``
* 401 on an authenticated request    -> ``SessionExpiredError`` (store cleared)
* any other error status / ``success: false`` -> ``ApiError``
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from .exceptions import ApiError, SessionExpiredError, TransportError
from .session_store import SessionStore

logger = logging.getLogger(__name__)


def _decode_payload(response: requests.Response) -> dict[str, Any]:
    """Return the JSON object body of *response*, or an empty dict."""
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def response_error_message(payload: dict[str, Any], default: str) -> str:
    """
    Extract the server's error message from a decoded payload.

    The API uses ``message``; ``error`` is accepted too.  Falls back to
    *default* when neither is a non-blank string.
    """
    for key in ("message", "error"):
        message = payload.get(key)
        if isinstance(message, str) and message.strip():
            return message
    return default


class ApiClient:
    """
    Thin wrapper around ``requests`` for the Taskflow REST API.

    Args:
        base_url: API root, e.g. ``"http://localhost:5000/api"``.
        session_store: Where the bearer token is read from and which is
            cleared when an authenticated call comes back 401.
        timeout: Per-request timeout in seconds (``None`` waits forever).
        http: Object with a ``requests.Session``-compatible ``request``
            method.  Defaults to a new ``requests.Session``.
    """

    def __init__(
        self,
        base_url: str,
        session_store: SessionStore,
        *,
        timeout: float | None = None,
        http: Any = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session_store = session_store
        self.timeout = timeout
        self.http = http if http is not None else requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _auth_headers(self) -> dict[str, str]:
        token = self.session_store.token
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def request(
        self,
        method: str,
        path: str,
        *,
        authenticated: bool = True,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """
        Send one request and return the decoded JSON payload.

        Raises:
            TransportError: The request produced no response.
            SessionExpiredError: 401 on a request that carried a token.
            ApiError: Any other non-2xx status or ``success: false`` body.
        """
        headers = {"Accept": "application/json"}
        if authenticated:
            headers.update(self._auth_headers())

        try:
            response = self.http.request(
                method=method,
                url=self._url(path),
                headers=headers,
                json=json,
                params=params or None,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TransportError(str(exc)) from exc

        payload = _decode_payload(response)

        if response.status_code == 401 and "Authorization" in headers:
            logger.info("%s %s returned 401; clearing session", method, path)
            self.session_store.clear()
            raise SessionExpiredError(
                response_error_message(payload, "Session expired"), 401, payload
            )

        if response.status_code >= 400 or payload.get("success") is False:
            raise ApiError(
                response_error_message(payload, ""),
                response.status_code,
                payload,
            )

        return payload

    def get(self, path: str, **kwargs: Any) -> dict[str, Any]:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> dict[str, Any]:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> dict[str, Any]:
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> dict[str, Any]:
        return self.request("DELETE", path, **kwargs)
