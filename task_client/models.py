"""
Client-side mirrors of the API's task contract.

The enums are duplicated rather than imported from ``api_app`` so the
client can be installed and used against a remote API without the server
package and its database dependencies.
"""

from __future__ import annotations

from enum import Enum


class TaskStatus(str, Enum):
    """Task lifecycle statuses (mirrors the API contract)."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    """Task priority levels (mirrors the API contract)."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Query parameters accepted by ``GET /tasks`` as equality filters.
FILTER_KEYS = ("status", "priority", "category")
