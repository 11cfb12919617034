"""
Bearer tokens for the Taskflow API.

A token is an RS256-signed JWT carrying the account id and role.  Only the
API holds the private key; anything with the public key can check a token
through :func:`decode_token`.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

import jwt

if TYPE_CHECKING:
    from .models import User

TOKEN_ALGORITHM = "RS256"
REQUIRED_TOKEN_CLAIMS = ["user_id", "role", "iat", "exp"]


def build_claims(
    user_id: int,
    role: str,
    *,
    issued_at: datetime,
    lifetime: timedelta,
) -> dict[str, Any]:
    """
    Claims for an account token.

    Raises:
        ValueError: If *user_id* is not positive or *role* is blank.
    """
    if int(user_id) <= 0:
        raise ValueError("user_id must be a positive integer")
    if not isinstance(role, str) or not role.strip():
        raise ValueError("role must be a non-empty string")

    return {
        "user_id": int(user_id),
        "role": role,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + lifetime).timestamp()),
    }


def issue_token(user: "User", private_key: str, lifetime: timedelta) -> str:
    """Sign a token for *user* that stays valid for *lifetime*."""
    claims = build_claims(
        user.id,
        user.role,
        issued_at=datetime.now(timezone.utc),
        lifetime=lifetime,
    )
    return jwt.encode(claims, private_key, algorithm=TOKEN_ALGORITHM)


def decode_token(token: str, public_key: str, *, leeway: int = 0) -> dict[str, Any]:
    """
    Verify *token* and return its claims.

    Raises:
        jwt.InvalidTokenError: On a bad signature, an expired token, a
            missing claim or a non-positive ``user_id``.
    """
    claims = jwt.decode(
        token,
        public_key,
        algorithms=[TOKEN_ALGORITHM],
        options={"require": REQUIRED_TOKEN_CLAIMS},
        leeway=leeway,
    )
    user_id = claims.get("user_id")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
        raise jwt.InvalidTokenError("user_id must be a positive integer")
    return claims
