"""
REST API endpoints for the task resource.

Every task endpoint is protected by ``require_auth`` and every query is
scoped to the authenticated user, so a task owned by someone else answers
404 exactly like a missing one.

Endpoints:
    GET    /api/health          - Service health check (public)
    GET    /api/tasks           - List tasks (status/priority/category filters, sort)
    GET    /api/tasks/stats     - Aggregate counts for the dashboard
    GET    /api/tasks/<id>      - Retrieve a single task
    POST   /api/tasks           - Create a new task
    PUT    /api/tasks/<id>      - Update a task (partial payloads accepted)
    DELETE /api/tasks/<id>      - Delete a task
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, time, timezone
from typing import Any

from flask import Blueprint, Response, g, jsonify, request
from sqlalchemy import Select, case, func, select

from .. import db
from ..auth import require_auth
from ..models import Task, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

tasks_bp = Blueprint("task_api", __name__)

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
CATEGORY_MAX_LENGTH = 50

FILTER_FIELDS = {
    "status": Task.status,
    "priority": Task.priority,
    "category": Task.category,
}


def _rank(column, values):
    """Order an enum column by declaration order instead of alphabetically."""
    return case({value: index for index, value in enumerate(values)}, value=column, else_=len(values))


SORT_FIELDS = {
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
    "dueDate": Task.due_date,
    # low < medium < high, pending < in-progress < completed
    "priority": _rank(Task.priority, [p.value for p in TaskPriority]),
    "status": _rank(Task.status, [s.value for s in TaskStatus]),
    "title": Task.title,
}


# =====================================================================
# Helper Functions
# =====================================================================


def _json_error(message: str, status_code: int) -> tuple[Response, int]:
    """Build the standard ``{"success": false, "message": ...}`` response."""
    return jsonify({"success": False, "message": message}), status_code


def _check_length(data: dict, field: str, limit: int, label: str) -> str | None:
    value = data.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        return f"{label} must be a string"
    # Stored values are stripped, so surrounding whitespace does not count
    if len(value.strip()) > limit:
        return f"{label} cannot exceed {limit} characters"
    return None


def validate_task_data(data: dict, *, creating: bool = False) -> tuple[bool, str | None]:
    """
    Validate an incoming task payload against the business rules.

    Args:
        data: The deserialised JSON request body.
        creating: When ``True`` the title must be present.

    Returns:
        A two-element tuple ``(is_valid, error_message)``.
    """
    if creating or "title" in data:
        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            return False, "Please provide a task title"

    for field, limit, label in (
        ("title", TITLE_MAX_LENGTH, "Title"),
        ("description", DESCRIPTION_MAX_LENGTH, "Description"),
        ("category", CATEGORY_MAX_LENGTH, "Category"),
    ):
        error = _check_length(data, field, limit, label)
        if error:
            return False, error

    if "status" in data:
        valid_statuses = [s.value for s in TaskStatus]
        if data["status"] not in valid_statuses:
            return False, f"Invalid status. Must be one of: {valid_statuses}"

    if "priority" in data:
        valid_priorities = [p.value for p in TaskPriority]
        if data["priority"] not in valid_priorities:
            return False, f"Invalid priority. Must be one of: {valid_priorities}"

    if data.get("dueDate"):
        try:
            parse_due_date(data["dueDate"])
        except (ValueError, AttributeError, TypeError):
            return False, "Invalid dueDate format. Use ISO format (YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS)"

    return True, None


def ensure_utc(value: datetime) -> datetime:
    """Normalise a datetime to timezone-aware UTC (naive values are assumed UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_due_date(date_string: str | None) -> datetime | None:
    """
    Parse an optional ISO-8601 date string into a UTC datetime.

    Returns:
        A timezone-aware UTC datetime, or ``None`` for ``None``/empty input.
    """
    if not date_string:
        return None
    parsed = datetime.fromisoformat(date_string.replace("Z", "+00:00"))
    return ensure_utc(parsed)


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def start_of_today() -> datetime:
    """Midnight of the current UTC day; due dates before it are overdue."""
    return datetime.combine(datetime.now(timezone.utc).date(), time.min, tzinfo=timezone.utc)


def _user_task_query() -> Select:
    """Base ``select`` restricted to the authenticated user's tasks."""
    return select(Task).where(Task.user_id == g.user_id)


def _get_user_task(task_id: int) -> Task | None:
    return db.session.scalar(_user_task_query().where(Task.id == task_id))


def compute_task_stats(user_id: int) -> dict[str, Any]:
    """
    Aggregate a user's tasks into the dashboard statistics snapshot.

    Every status and priority key is always present, zero when no task
    matches.  A task is overdue when its due date falls before the start of
    the current UTC day and it is not completed.
    """
    by_status = {status.value: 0 for status in TaskStatus}
    rows = db.session.execute(
        select(Task.status, func.count(Task.id))
        .where(Task.user_id == user_id)
        .group_by(Task.status)
    ).all()
    for status, count in rows:
        by_status[status] = count

    by_priority = {priority.value: 0 for priority in TaskPriority}
    rows = db.session.execute(
        select(Task.priority, func.count(Task.id))
        .where(Task.user_id == user_id)
        .group_by(Task.priority)
    ).all()
    for priority, count in rows:
        by_priority[priority] = count

    overdue = db.session.scalar(
        select(func.count(Task.id)).where(
            Task.user_id == user_id,
            Task.due_date.is_not(None),
            Task.due_date < start_of_today(),
            Task.status != TaskStatus.COMPLETED.value,
        )
    )

    return {
        "total": sum(by_status.values()),
        "byStatus": by_status,
        "byPriority": by_priority,
        "overdue": overdue or 0,
    }


# =====================================================================
# API Endpoints
# =====================================================================


@tasks_bp.route("/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    """Health check endpoint for deployment verification."""
    return jsonify({
        "status": "healthy",
        "service": "api",
        "environment": os.getenv("ENVIRONMENT", "unknown"),
    }), 200


@tasks_bp.route("/tasks", methods=["GET"])
@require_auth
def get_tasks() -> tuple[Response, int]:
    """
    List the caller's tasks with optional filtering and sorting.

    Query Parameters:
        status, priority, category: Equality filters; empty values are ignored.
        sort: createdAt (default), updatedAt, dueDate, priority, status, title
        order: desc (default) or asc
    """
    logger.info("GET /api/tasks - Fetching tasks for user %s", g.user_id)

    stmt = _user_task_query()
    for name, column in FILTER_FIELDS.items():
        value = request.args.get(name)
        if value:
            stmt = stmt.where(column == value)

    column = SORT_FIELDS.get(request.args.get("sort", "createdAt"), Task.created_at)
    if request.args.get("order", "desc") == "asc":
        stmt = stmt.order_by(column.asc(), Task.id.asc())
    else:
        stmt = stmt.order_by(column.desc(), Task.id.desc())

    tasks = db.session.scalars(stmt).all()
    logger.info("Found %d tasks", len(tasks))

    return jsonify({
        "success": True,
        "count": len(tasks),
        "data": [task.to_dict() for task in tasks],
    }), 200


@tasks_bp.route("/tasks/stats", methods=["GET"])
@require_auth
def get_task_stats() -> tuple[Response, int]:
    """Return the caller's statistics snapshot."""
    logger.info("GET /api/tasks/stats - Computing stats for user %s", g.user_id)
    return jsonify({"success": True, "data": compute_task_stats(g.user_id)}), 200


@tasks_bp.route("/tasks/<int:task_id>", methods=["GET"])
@require_auth
def get_task(task_id: int) -> tuple[Response, int]:
    """Get a single task by ID (404 when missing or owned by someone else)."""
    logger.info("GET /api/tasks/%s - Fetching task", task_id)

    task = _get_user_task(task_id)
    if not task:
        logger.warning("Task %s not found", task_id)
        return _json_error("Task not found", 404)

    return jsonify({"success": True, "data": task.to_dict()}), 200


@tasks_bp.route("/tasks", methods=["POST"])
@require_auth
def create_task() -> tuple[Response, int]:
    """
    Create a new task owned by the caller.

    Request Body (JSON):
        title: Task title (required)
        description, category, dueDate: optional
        status: optional, default pending
        priority: optional, default medium
    """
    logger.info("POST /api/tasks - Creating new task")

    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return _json_error("Request body must be JSON", 400)

    is_valid, error = validate_task_data(data, creating=True)
    if not is_valid:
        logger.warning("Validation failed: %s", error)
        return _json_error(error, 400)

    task = Task(
        user_id=g.user_id,
        title=data["title"].strip(),
        description=_optional_text(data.get("description")),
        priority=data.get("priority", TaskPriority.MEDIUM.value),
        due_date=parse_due_date(data.get("dueDate")),
        category=_optional_text(data.get("category")),
    )
    task.set_status(data.get("status", TaskStatus.PENDING.value))

    db.session.add(task)
    db.session.commit()

    logger.info("Created task with ID: %s", task.id)
    return jsonify({"success": True, "data": task.to_dict()}), 201


@tasks_bp.route("/tasks/<int:task_id>", methods=["PUT"])
@require_auth
def update_task(task_id: int) -> tuple[Response, int]:
    """
    Update an existing task.

    Only the fields present in the body change.  Status transitions are
    unrestricted; ``completedAt`` follows the status.
    """
    logger.info("PUT /api/tasks/%s - Updating task", task_id)

    task = _get_user_task(task_id)
    if not task:
        logger.warning("Task %s not found", task_id)
        return _json_error("Task not found", 404)

    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return _json_error("Request body must be JSON", 400)

    is_valid, error = validate_task_data(data)
    if not is_valid:
        logger.warning("Validation failed: %s", error)
        return _json_error(error, 400)

    if "title" in data:
        task.title = data["title"].strip()
    if "description" in data:
        task.description = _optional_text(data["description"])
    if "priority" in data:
        task.priority = data["priority"]
    if "dueDate" in data:
        task.due_date = parse_due_date(data["dueDate"])
    if "category" in data:
        task.category = _optional_text(data["category"])
    if "status" in data:
        task.set_status(data["status"])

    db.session.commit()

    logger.info("Updated task %s", task_id)
    return jsonify({"success": True, "data": task.to_dict()}), 200


@tasks_bp.route("/tasks/<int:task_id>", methods=["DELETE"])
@require_auth
def delete_task(task_id: int) -> tuple[Response, int]:
    """Hard-delete a task, returning the removed record."""
    logger.info("DELETE /api/tasks/%s - Deleting task", task_id)

    task = _get_user_task(task_id)
    if not task:
        logger.warning("Task %s not found", task_id)
        return _json_error("Task not found", 404)

    payload = task.to_dict()
    db.session.delete(task)
    db.session.commit()

    logger.info("Deleted task %s", task_id)
    return jsonify({"success": True, "data": payload}), 200


# =====================================================================
# Error Handlers
# =====================================================================


@tasks_bp.app_errorhandler(400)
def bad_request(error: Exception) -> tuple[Response, int]:
    """Handle 400 Bad Request errors."""
    return _json_error("Bad request", 400)


@tasks_bp.app_errorhandler(404)
def not_found(error: Exception) -> tuple[Response, int]:
    """Handle 404 Not Found errors."""
    return _json_error("Resource not found", 404)


@tasks_bp.app_errorhandler(405)
def method_not_allowed(error: Exception) -> tuple[Response, int]:
    """Handle 405 Method Not Allowed errors."""
    return _json_error("Method not allowed", 405)


@tasks_bp.app_errorhandler(500)
def internal_error(error: Exception) -> tuple[Response, int]:
    """Handle 500 Internal Server errors."""
    logger.error("Internal server error: %s", error)
    return _json_error("Internal server error", 500)
