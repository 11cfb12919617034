"""
Form validation for the task client.

Pure functions, no I/O.  Each returns a ``{field: message}`` dict that is
empty when the input is acceptable.  These checks only save a round-trip;
the API repeats all of them and its answer is the one that counts.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
CATEGORY_MAX_LENGTH = 50
NAME_MIN_LENGTH = 2
PASSWORD_MIN_LENGTH = 6


def is_valid_email(value: str | None) -> bool:
    """Loose shape check: something, ``@``, something, ``.``, something."""
    return bool(value) and EMAIL_PATTERN.search(value) is not None


def parse_due_date(value: str | None) -> date | None:
    """
    Parse a form due date into a calendar date.

    Accepts ``YYYY-MM-DD`` (the HTML date input) and full ISO-8601
    datetimes (``Z`` suffix included).

    Raises:
        ValueError: If *value* is not a recognisable date.
    """
    if not value:
        return None
    value = value.strip()
    try:
        return date.fromisoformat(value)
    except ValueError:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()


def _today() -> date:
    return datetime.now(timezone.utc).date()


def validate_task_form(data: Mapping[str, Any], today: date | None = None) -> dict[str, str]:
    """
    Validate task form fields: ``title``, ``description``, ``category``, ``dueDate``.

    The due date is compared by calendar day, so a task due today is
    accepted whatever the time of day.
    """
    errors: dict[str, str] = {}

    title = (data.get("title") or "").strip()
    if not title:
        errors["title"] = "Title is required"
    elif len(title) > TITLE_MAX_LENGTH:
        errors["title"] = f"Title cannot exceed {TITLE_MAX_LENGTH} characters"

    description = (data.get("description") or "").strip()
    if len(description) > DESCRIPTION_MAX_LENGTH:
        errors["description"] = f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters"

    category = (data.get("category") or "").strip()
    if len(category) > CATEGORY_MAX_LENGTH:
        errors["category"] = f"Category cannot exceed {CATEGORY_MAX_LENGTH} characters"

    try:
        due = parse_due_date(data.get("dueDate"))
    except ValueError:
        errors["dueDate"] = "Invalid date"
    else:
        if due is not None and due < (today or _today()):
            errors["dueDate"] = "Due date cannot be in the past"

    return errors


def validate_login_form(email: str | None, password: str | None) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not email:
        errors["email"] = "Email is required"
    elif not is_valid_email(email):
        errors["email"] = "Email is invalid"
    if not password:
        errors["password"] = "Password is required"
    return errors


def validate_registration_form(
    name: str | None,
    email: str | None,
    password: str | None,
    confirm_password: str | None,
) -> dict[str, str]:
    """Validate the sign-up form, including the password confirmation."""
    errors = _validate_name_and_email(name, email)

    if not password:
        errors["password"] = "Password is required"
    elif len(password) < PASSWORD_MIN_LENGTH:
        errors["password"] = f"Password must be at least {PASSWORD_MIN_LENGTH} characters"

    if not confirm_password:
        errors["confirmPassword"] = "Please confirm your password"
    elif password != confirm_password:
        errors["confirmPassword"] = "Passwords do not match"

    return errors


def validate_profile_form(name: str | None, email: str | None) -> dict[str, str]:
    return _validate_name_and_email(name, email)


def _validate_name_and_email(name: str | None, email: str | None) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not name or not name.strip():
        errors["name"] = "Name is required"
    elif len(name.strip()) < NAME_MIN_LENGTH:
        errors["name"] = f"Name must be at least {NAME_MIN_LENGTH} characters"

    if not email or not email.strip():
        errors["email"] = "Email is required"
    elif not is_valid_email(email):
        errors["email"] = "Email is invalid"
    return errors
