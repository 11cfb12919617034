"""
Request authentication for the Taskflow API.

``require_auth`` protects endpoints that act on behalf of a user.  On
success the caller's identity lands on ``flask.g`` so handlers can scope
every query to ``g.user_id``.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

import jwt
from flask import Response, current_app, g, jsonify, request

from .tokens import decode_token


def verify_token(token: str, public_key: str) -> dict[str, Any] | None:
    """
    Return the claims of a valid token, or ``None`` for any invalid one.

    Expiry is checked with ``JWT_CLOCK_SKEW_SECONDS`` of leeway.
    """
    try:
        return decode_token(
            token,
            public_key,
            leeway=int(current_app.config.get("JWT_CLOCK_SKEW_SECONDS", 30)),
        )
    except jwt.InvalidTokenError:
        return None

def extract_bearer_token() -> str | None:
    """
    Extract the token from an ``Authorization: Bearer <token>`` header.

    Returns:
        The raw JWT string, or ``None`` when the header is absent, malformed
        or empty.
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    token = auth_header[7:].strip()
    return token or None


def _unauthorized(message: str) -> tuple[Response, int]:
    return jsonify({"success": False, "message": message}), 401


def require_auth(view_func: Callable[..., tuple[Response, int] | Response]):
    """
    Decorator that enforces bearer-token authentication on API endpoints.

    On success stores ``g.user_id`` and ``g.role`` for the wrapped view.
    Otherwise the request is short-circuited with a ``401`` JSON error.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        token = extract_bearer_token()
        if token is None:
            return _unauthorized("Not authorized, no token")

        payload = verify_token(token, current_app.config["JWT_PUBLIC_KEY"])
        if payload is None:
            return _unauthorized("Not authorized, token failed")

        g.user_id = payload["user_id"]
        g.role = payload["role"]
        return view_func(*args, **kwargs)

    return wrapper
