"""
Task collection manager.

Holds the current user's task list and the dashboard statistics snapshot,
and is the only code that mutates them.  After every successful create,
update or delete the snapshot is re-fetched from the API instead of being
recomputed locally, so the list and the dashboard never drift apart.

Like the auth manager, every public operation returns a result
(``bool`` or ``None``) and reports failures through the notifier.  An
expired session is the exception: the store clears itself and its
subscribers are told, so no second notification is sent.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from .api_client import ApiClient
from .events import Notifier, Subscribers, log_notifier
from .exceptions import ApiError, ClientError, SessionExpiredError
from .models import FILTER_KEYS

logger = logging.getLogger(__name__)

RECENT_TASK_LIMIT = 5


def build_filter_params(filters: Mapping[str, Any] | None) -> dict[str, str]:
    """
    Reduce *filters* to the query parameters sent to ``GET /tasks``.

    Only the known filter keys are considered and empty values are dropped,
    so ``{"status": "", "priority": "high"}`` becomes ``{"priority": "high"}``.
    """
    if not filters:
        return {}
    params: dict[str, str] = {}
    for key in FILTER_KEYS:
        value = filters.get(key)
        if value:
            params[key] = str(value)
    return params


def search_tasks(tasks: Iterable[dict[str, Any]], term: str | None) -> list[dict[str, Any]]:
    """Case-insensitive substring match on title or description."""
    tasks = list(tasks)
    needle = (term or "").strip().lower()
    if not needle:
        return tasks
    return [
        task
        for task in tasks
        if needle in (task.get("title") or "").lower()
        or needle in (task.get("description") or "").lower()
    ]


class TaskCollectionManager:
    """
    CRUD operations on ``/tasks`` plus the held ``tasks``/``stats`` state.

    Attributes:
        tasks: The most recently fetched list, newest first.
        stats: The most recent statistics snapshot, or ``None``.
        loading: ``True`` while ``fetch_tasks`` is in flight.
    """

    def __init__(self, api: ApiClient, notify: Notifier | None = None) -> None:
        self.api = api
        self.notify = notify or log_notifier
        self.tasks: list[dict[str, Any]] = []
        self.stats: dict[str, Any] | None = None
        self.loading = False
        self._subscribers: Subscribers[TaskCollectionManager] = Subscribers()

    def subscribe(self, callback: Callable[["TaskCollectionManager"], Any]) -> Callable[[], None]:
        """Register *callback* to run after every change to ``tasks`` or ``stats``."""
        return self._subscribers.subscribe(callback)

    def _changed(self) -> None:
        self._subscribers.publish(self)

    def recent_tasks(self, limit: int = RECENT_TASK_LIMIT) -> list[dict[str, Any]]:
        return self.tasks[:limit]

    def fetch_tasks(self, filters: Mapping[str, Any] | None = None) -> bool:
        """Replace ``tasks`` with the API's listing for *filters*."""
        self.loading = True
        try:
            payload = self.api.get("/tasks", params=build_filter_params(filters))
        except SessionExpiredError:
            logger.info("Fetch tasks stopped: session expired")
            return False
        except ClientError as exc:
            logger.warning("Fetch tasks failed: %s", exc)
            self.notify("Failed to fetch tasks", "error")
            return False
        finally:
            self.loading = False

        self.tasks = list(payload.get("data") or [])
        logger.debug("Fetched %d tasks", len(self.tasks))
        self._changed()
        return True

    def fetch_stats(self) -> bool:
        """Replace ``stats`` with a fresh snapshot.  Failures are only logged."""
        try:
            payload = self.api.get("/tasks/stats")
        except ClientError as exc:
            logger.warning("Fetch stats failed: %s", exc)
            return False

        self.stats = payload.get("data")
        self._changed()
        return True

    def create_task(self, data: Mapping[str, Any]) -> bool:
        """Create a task; on success it is prepended to ``tasks``."""
        task = self._mutate("POST", "/tasks", dict(data), "Failed to create task")
        if task is None:
            return False
        self.tasks = [task, *self.tasks]
        self._after_mutation("Task created successfully!")
        return True

    def update_task(self, task_id: int | str, data: Mapping[str, Any]) -> bool:
        """Update a task; on success the held copy is replaced in place."""
        task = self._mutate("PUT", f"/tasks/{task_id}", dict(data), "Failed to update task")
        if task is None:
            return False
        self.tasks = [task if _same_id(held, task_id) else held for held in self.tasks]
        self._after_mutation("Task updated successfully!")
        return True

    def delete_task(self, task_id: int | str) -> bool:
        """Delete a task; on success it is removed from ``tasks``."""
        if self._mutate("DELETE", f"/tasks/{task_id}", None, "Failed to delete task") is None:
            return False
        self.tasks = [held for held in self.tasks if not _same_id(held, task_id)]
        self._after_mutation("Task deleted successfully!")
        return True

    def get_task(self, task_id: int | str) -> dict[str, Any] | None:
        """Fetch one task without touching ``tasks``; ``None`` on any failure."""
        try:
            payload = self.api.get(f"/tasks/{task_id}")
        except ClientError as exc:
            logger.warning("Get task %s failed: %s", task_id, exc)
            return None
        task = payload.get("data")
        return task if isinstance(task, dict) else None

    def _mutate(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None,
        failure_message: str,
    ) -> dict[str, Any] | None:
        try:
            payload = self.api.request(method, path, json=body)
        except SessionExpiredError:
            logger.info("%s %s stopped: session expired", method, path)
            return None
        except ApiError as exc:
            self.notify(exc.message or failure_message, "error")
            return None
        except ClientError:
            self.notify(failure_message, "error")
            return None

        task = payload.get("data")
        if not isinstance(task, dict):
            self.notify(failure_message, "error")
            return None
        return task

    def _after_mutation(self, message: str) -> None:
        self.notify(message, "success")
        self._changed()
        self.fetch_stats()


def _same_id(task: Mapping[str, Any], task_id: int | str) -> bool:
    # ids arrive as ints from JSON but as strings from URLs and forms
    return str(task.get("id")) == str(task_id)
