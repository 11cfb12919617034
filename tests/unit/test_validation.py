"""
Unit tests for the client-side form validation.

Pure functions with no I/O, so every case is a direct call.  Boundary
values (exactly 100 characters, today's date) get their own tests.
"""

from __future__ import annotations

from datetime import date

import pytest

from task_client.validation import (
    is_valid_email,
    parse_due_date,
    validate_login_form,
    validate_profile_form,
    validate_registration_form,
    validate_task_form,
)

pytestmark = pytest.mark.unit

TODAY = date(2030, 6, 15)


def test_task_form_valid_returns_no_errors():
    errors = validate_task_form(
        {"title": "Buy milk", "description": "2 litres", "category": "home", "dueDate": "2030-06-20"},
        today=TODAY,
    )

    assert errors == {}


@pytest.mark.parametrize("title", ["", "   ", None])
def test_task_form_requires_title(title):
    errors = validate_task_form({"title": title}, today=TODAY)

    assert errors["title"] == "Title is required"


def test_task_form_title_boundary():
    """Test that 100 characters pass and 101 fail."""
    assert "title" not in validate_task_form({"title": "x" * 100}, today=TODAY)
    assert validate_task_form({"title": "x" * 101}, today=TODAY)["title"] == (
        "Title cannot exceed 100 characters"
    )
    assert "title" not in validate_task_form({"title": "  " + "x" * 100 + " "}, today=TODAY)


def test_task_form_description_and_category_limits():
    errors = validate_task_form(
        {"title": "ok", "description": "d" * 501, "category": "c" * 51},
        today=TODAY,
    )

    assert errors["description"] == "Description cannot exceed 500 characters"
    assert errors["category"] == "Category cannot exceed 50 characters"


def test_task_form_due_today_is_accepted():
    errors = validate_task_form({"title": "ok", "dueDate": TODAY.isoformat()}, today=TODAY)

    assert "dueDate" not in errors


def test_task_form_due_yesterday_is_rejected():
    errors = validate_task_form({"title": "ok", "dueDate": "2030-06-14"}, today=TODAY)

    assert errors["dueDate"] == "Due date cannot be in the past"


def test_task_form_invalid_date():
    errors = validate_task_form({"title": "ok", "dueDate": "next tuesday"}, today=TODAY)

    assert errors["dueDate"] == "Invalid date"


def test_parse_due_date_accepts_iso_datetime_with_z():
    assert parse_due_date("2030-06-20T00:00:00Z") == date(2030, 6, 20)
    assert parse_due_date("") is None


@pytest.mark.parametrize(
    "value, expected",
    [
        ("user@example.com", True),
        ("a@b.co", True),
        ("no-at-sign.com", False),
        ("user@nodot", False),
        ("", False),
        (None, False),
    ],
)
def test_is_valid_email(value, expected):
    assert is_valid_email(value) is expected


def test_login_form_requires_both_fields():
    errors = validate_login_form("", "")

    assert errors == {"email": "Email is required", "password": "Password is required"}


def test_login_form_rejects_malformed_email():
    assert validate_login_form("not-an-email", "secret") == {"email": "Email is invalid"}


def test_registration_form_valid():
    assert validate_registration_form("Ada", "ada@example.com", "secret1", "secret1") == {}


def test_registration_form_collects_every_error():
    errors = validate_registration_form("A", "bad", "123", "456")

    assert errors == {
        "name": "Name must be at least 2 characters",
        "email": "Email is invalid",
        "password": "Password must be at least 6 characters",
        "confirmPassword": "Passwords do not match",
    }


def test_registration_form_requires_confirmation():
    errors = validate_registration_form("Ada", "ada@example.com", "secret1", "")

    assert errors == {"confirmPassword": "Please confirm your password"}


def test_profile_form_requires_name_and_email():
    errors = validate_profile_form("  ", "")

    assert errors == {"name": "Name is required", "email": "Email is required"}
