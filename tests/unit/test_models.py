"""
Unit tests for the User and Task models.

Covers password hashing, the camelCase serialisation contract, field
defaults, and the ``completedAt`` bookkeeping performed by
``Task.set_status``.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from api_app.models import Task, TaskPriority, TaskStatus, User, UserRole

pytestmark = pytest.mark.unit


def test_user_password_is_hashed(db_session):
    """Test that set_password never stores the plain-text password."""
    # Arrange
    user = User(name="Ada", email="ada@example.com")

    # Act
    user.set_password("s3cret-pass")

    # Assert
    assert user.password_hash != "s3cret-pass"
    assert user.check_password("s3cret-pass")
    assert not user.check_password("wrong-pass")


def test_user_to_dict_excludes_password_hash(user):
    """Test that the serialised user carries the public fields only."""
    # Act
    data = user.to_dict()

    # Assert
    assert set(data) == {"id", "name", "email", "role", "createdAt", "lastLogin"}
    assert data["role"] == UserRole.USER.value
    assert data["createdAt"] is not None
    assert data["lastLogin"] is None


def test_task_defaults_and_to_dict(db_session, user):
    """Test that a task created with only a title gets the documented defaults."""
    # Arrange
    task = Task(user_id=user.id, title="Test Task")

    # Act
    db_session.session.add(task)
    db_session.session.commit()
    data = task.to_dict()

    # Assert
    assert data["title"] == "Test Task"
    assert data["user"] == user.id
    assert data["status"] == TaskStatus.PENDING.value
    assert data["priority"] == TaskPriority.MEDIUM.value
    assert data["description"] is None
    assert data["dueDate"] is None
    assert data["category"] is None
    assert data["completedAt"] is None
    assert data["createdAt"] is not None
    assert data["updatedAt"] is not None


def test_task_due_date_serialization(user, task_factory):
    """Test that dueDate is emitted as a UTC ISO-8601 string."""
    # Arrange
    due_date = datetime(2030, 1, 1, tzinfo=timezone.utc)
    task = task_factory(user, title="Due Date Task", due_date=due_date)

    # Act
    parsed = datetime.fromisoformat(task.to_dict()["dueDate"])

    # Assert
    assert parsed == due_date


@pytest.mark.parametrize("status", [TaskStatus.PENDING.value, TaskStatus.IN_PROGRESS.value])
def test_set_status_completed_sets_completed_at(status):
    """Test that entering the completed status stamps completed_at."""
    # Arrange
    task = Task(title="Finish me")
    task.set_status(status)
    assert task.completed_at is None

    # Act
    task.set_status(TaskStatus.COMPLETED.value)

    # Assert
    assert task.status == TaskStatus.COMPLETED.value
    assert task.completed_at is not None


def test_set_status_completed_twice_keeps_original_timestamp():
    """Test that re-completing a completed task does not move completed_at."""
    # Arrange
    task = Task(title="Done")
    task.set_status(TaskStatus.COMPLETED.value)
    first = task.completed_at

    # Act
    task.set_status(TaskStatus.COMPLETED.value)

    # Assert
    assert task.completed_at == first


def test_set_status_leaving_completed_clears_completed_at():
    """Test that reopening a task clears completed_at."""
    # Arrange
    task = Task(title="Reopen")
    task.set_status(TaskStatus.COMPLETED.value)

    # Act
    task.set_status(TaskStatus.IN_PROGRESS.value)

    # Assert
    assert task.completed_at is None
