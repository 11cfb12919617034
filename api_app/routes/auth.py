"""
Account API endpoints.

Mounted under ``/api/auth`` by the application factory.  Every response
uses the ``{"success": ..., ...}`` envelope the client expects: successful
calls carry ``user`` (and ``token`` where one is issued), failures carry a
human-readable ``message``.

Endpoints:
    POST /register  -- Create an account and receive a token.
    POST /login     -- Authenticate and receive a token.
    GET  /me        -- Return the authenticated user's profile.
    PUT  /profile   -- Update the authenticated user's name and/or email.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any

from flask import Blueprint, Response, current_app, g, jsonify, request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from .. import db
from ..auth import require_auth
from ..models import User
from ..tokens import issue_token

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth_api", __name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 120
PASSWORD_MIN_LENGTH = 6


# =====================================================================
# Helper Functions
# =====================================================================


def _json_error(message: str, status_code: int) -> tuple[Response, int]:
    """Build the standard ``{"success": false, "message": ...}`` response."""
    return jsonify({"success": False, "message": message}), status_code


def _validate_name(value: Any) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return "Please provide a name"
    name = value.strip()
    if len(name) < NAME_MIN_LENGTH:
        return f"Name must be at least {NAME_MIN_LENGTH} characters"
    if len(name) > NAME_MAX_LENGTH:
        return f"Name cannot exceed {NAME_MAX_LENGTH} characters"
    return None


def _validate_email(value: Any) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return "Please provide an email"
    email = value.strip()
    if len(email) > EMAIL_MAX_LENGTH:
        return f"Email cannot exceed {EMAIL_MAX_LENGTH} characters"
    if not EMAIL_PATTERN.match(email):
        return "Please provide a valid email"
    return None


def _normalize_email(value: str) -> str:
    return value.strip().lower()


def _email_taken(email: str, *, exclude_user_id: int | None = None) -> bool:
    stmt = select(User).where(User.email == email)
    if exclude_user_id is not None:
        stmt = stmt.where(User.id != exclude_user_id)
    return db.session.scalar(stmt) is not None


def _issue_token(user: User) -> str:
    return issue_token(
        user,
        current_app.config["JWT_PRIVATE_KEY"],
        timedelta(hours=current_app.config["JWT_EXPIRY_HOURS"]),
    )


# =====================================================================
# API Endpoints
# =====================================================================


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple[Response, int]:
    """
    Register a new user account.

    Returns:
        201 with ``token`` and ``user`` on success.
        400 if a field is missing or malformed.
        409 if the email is already registered.
    """
    data = request.get_json(silent=True) or {}

    error = _validate_name(data.get("name")) or _validate_email(data.get("email"))
    if error:
        return _json_error(error, 400)

    password = data.get("password")
    if not isinstance(password, str) or not password:
        return _json_error("Please provide a password", 400)
    if len(password) < PASSWORD_MIN_LENGTH:
        return _json_error(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters", 400
        )

    email = _normalize_email(data["email"])
    if _email_taken(email):
        logger.warning("Registration rejected: email already registered")
        return _json_error("User already exists with this email", 409)

    user = User(name=data["name"].strip(), email=email)
    user.set_password(password)
    user.last_login = datetime.now(timezone.utc)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        db.session.rollback()
        logger.warning("Registration rejected: email already registered")
        return _json_error("User already exists with this email", 409)

    logger.info("Registered user %s", user.id)
    return jsonify({"success": True, "token": _issue_token(user), "user": user.to_dict()}), 201


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple[Response, int]:
    """
    Authenticate a user and issue a token.

    The deliberately vague ``"Invalid credentials"`` message avoids
    revealing whether the email exists.

    Returns:
        200 with ``token`` and ``user`` on success.
        400 if email or password is missing.
        401 if the credentials are incorrect.
    """
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")
    if not isinstance(email, str) or not email.strip() or not isinstance(password, str) or not password:
        return _json_error("Please provide email and password", 400)

    user = db.session.scalar(select(User).where(User.email == _normalize_email(email)))
    if not user or not user.check_password(password):
        logger.warning("Login failed for supplied credentials")
        return _json_error("Invalid credentials", 401)

    user.last_login = datetime.now(timezone.utc)
    db.session.commit()

    logger.info("User %s logged in", user.id)
    return jsonify({"success": True, "token": _issue_token(user), "user": user.to_dict()}), 200


@auth_bp.route("/me", methods=["GET"])
@require_auth
def me() -> tuple[Response, int]:
    """
    Return the profile of the token's owner.

    A token whose user no longer exists is treated as unauthorized so the
    client drops its stale session.
    """
    user = db.session.get(User, g.user_id)
    if user is None:
        return _json_error("User not found", 401)
    return jsonify({"success": True, "user": user.to_dict()}), 200


@auth_bp.route("/profile", methods=["PUT"])
@require_auth
def update_profile() -> tuple[Response, int]:
    """
    Update the authenticated user's name and/or email.

    Only ``name`` and ``email`` are writable; any other field in the body
    (``role``, ``password`` ...) is ignored.

    Returns:
        200 with the updated ``user``.
        400 on validation failure or when neither field is supplied.
        409 if the new email belongs to another account.
    """
    user = db.session.get(User, g.user_id)
    if user is None:
        return _json_error("User not found", 401)

    data = request.get_json(silent=True) or {}
    if "name" not in data and "email" not in data:
        return _json_error("Provide a name or email to update", 400)

    if "name" in data:
        error = _validate_name(data["name"])
        if error:
            return _json_error(error, 400)
    if "email" in data:
        error = _validate_email(data["email"])
        if error:
            return _json_error(error, 400)
        if _email_taken(_normalize_email(data["email"]), exclude_user_id=user.id):
            return _json_error("Email is already in use", 409)

    if "name" in data:
        user.name = data["name"].strip()
    if "email" in data:
        user.email = _normalize_email(data["email"])
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return _json_error("Email is already in use", 409)

    logger.info("Updated profile for user %s", user.id)
    return jsonify({"success": True, "user": user.to_dict()}), 200
