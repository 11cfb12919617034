"""
Database models for the Taskflow API.

Defines the SQLAlchemy ORM models backing the service: :class:`User`, which
stores credentials and profile data, and :class:`Task`, a to-do item owned
by exactly one user.  Serialisation helpers emit the camelCase JSON contract
consumed by the client (``dueDate``, ``createdAt`` ...), never the password
hash.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from werkzeug.security import check_password_hash, generate_password_hash

from . import db


class TaskStatus(str, Enum):
    """
    Enumeration of possible task lifecycle statuses.

    Inherits from ``str`` so that each member's value is a plain string and
    compares equal to raw strings stored in the database column.
    """

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    """Enumeration of task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class UserRole(str, Enum):
    """Single role field carried by every account."""

    USER = "user"
    ADMIN = "admin"


def _to_utc_iso(value: datetime | None) -> str | None:
    """
    Convert a datetime to a UTC ISO-8601 string.

    SQLite does not store timezone information, so values read back from
    the database may be naive even though they were written in UTC.  Naive
    values are assumed UTC; aware values are converted.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(db.Model):
    """
    User model for authentication and identity.

    Passwords are never stored in plain text -- only a one-way hash is
    persisted, and ``to_dict`` omits it so the output can be returned in
    API responses.

    Attributes:
        id: Auto-incrementing integer primary key.
        name: Display name (max 50 chars).
        email: Unique email address (max 120 chars), indexed for login.
        password_hash: Werkzeug-generated hash of the user's password.
        role: Single role string, ``"user"`` by default.
        created_at: Timestamp of account creation (UTC).
        last_login: Timestamp of the most recent successful login.
    """

    __tablename__ = "users"

    __table_args__ = (
        db.CheckConstraint("length(name) <= 50", name="ck_users_name_len"),
        db.CheckConstraint("length(email) <= 120", name="ck_users_email_len"),
    )

    id: int = db.Column(db.Integer, primary_key=True)
    name: str = db.Column(db.String(50), nullable=False)
    # Indexed because every login request looks up a user by email
    email: str = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash: str = db.Column(db.String(256), nullable=False)
    role: str = db.Column(db.String(20), nullable=False, default=UserRole.USER.value)
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    last_login: datetime | None = db.Column(db.DateTime(timezone=True), nullable=True)

    tasks = db.relationship(
        "Task",
        back_populates="owner",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )

    def set_password(self, password: str) -> None:
        """Hash and store a plain-text password (PBKDF2 via Werkzeug)."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Return ``True`` if *password* matches the stored hash."""
        return check_password_hash(self.password_hash, password)

    def to_dict(self) -> dict[str, Any]:
        """
        Return a user-safe dictionary representation.

        The ``password_hash`` field is intentionally excluded.
        """
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "createdAt": _to_utc_iso(self.created_at),
            "lastLogin": _to_utc_iso(self.last_login),
        }

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email}>"


class Task(db.Model):
    """
    Task model owned by a single user.

    Attributes:
        id: Auto-incrementing primary key.
        user_id: Owning user.  Every query in the API layer filters by this
            value (sourced from the verified token).
        title: Short summary of the task (max 100 characters).
        description: Optional details (max 500 characters).
        status: Current lifecycle status (see ``TaskStatus``).
        priority: Importance level (see ``TaskPriority``).
        due_date: Optional timezone-aware deadline.
        category: Optional free-text grouping (max 50 characters).
        created_at: Timestamp of task creation (UTC).
        updated_at: Timestamp of last modification (UTC, auto-updated).
        completed_at: Set when the task enters ``completed``, cleared when
            it leaves that status.
    """

    __tablename__ = "tasks"

    id: int = db.Column(db.Integer, primary_key=True)
    user_id: int = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    title: str = db.Column(db.String(100), nullable=False)
    description: str | None = db.Column(db.String(500), nullable=True)
    status: str = db.Column(
        db.String(20),
        nullable=False,
        default=TaskStatus.PENDING.value,
    )
    priority: str = db.Column(
        db.String(20),
        nullable=False,
        default=TaskPriority.MEDIUM.value,
    )
    due_date: datetime | None = db.Column(db.DateTime(timezone=True), nullable=True)
    category: str | None = db.Column(db.String(50), nullable=True)
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )
    completed_at: datetime | None = db.Column(db.DateTime(timezone=True), nullable=True)

    owner = db.relationship("User", back_populates="tasks")

    def set_status(self, status: str) -> None:
        """Apply a status transition and keep ``completed_at`` in step."""
        if status == TaskStatus.COMPLETED.value:
            if self.status != TaskStatus.COMPLETED.value or self.completed_at is None:
                self.completed_at = _utcnow()
        else:
            self.completed_at = None
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        """Serialise the task to a JSON-safe dictionary."""
        return {
            "id": self.id,
            "user": self.user_id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "dueDate": _to_utc_iso(self.due_date),
            "category": self.category,
            "createdAt": _to_utc_iso(self.created_at),
            "updatedAt": _to_utc_iso(self.updated_at),
            "completedAt": _to_utc_iso(self.completed_at),
        }

    def __repr__(self) -> str:
        return f"<Task {self.id}: {self.title}>"
