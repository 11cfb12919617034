"""
Integration tests for :class:`task_client.TaskCollectionManager`.

Runs the manager against the real API and checks both its held state
(``tasks``/``stats``) and what it sent, including the statistics refetch
after every successful mutation.
"""

from __future__ import annotations

import pytest

from shared.test_helpers import create_test_token
from task_client.task_collection import build_filter_params, search_tasks

pytestmark = pytest.mark.integration


def _stats_fetches(api_transport) -> int:
    return sum(1 for call in api_transport.calls if call["url"].endswith("/tasks/stats"))


def test_buy_milk_scenario(logged_in, task_manager, notifications):
    """Create, complete and delete one task, watching the stats follow along."""
    assert task_manager.fetch_stats()
    high_before = task_manager.stats["byPriority"]["high"]

    # Create
    assert task_manager.create_task({"title": "Buy milk", "priority": "high"})
    assert task_manager.tasks[0]["title"] == "Buy milk"
    assert task_manager.tasks[0]["status"] == "pending"
    assert task_manager.stats["byPriority"]["high"] == high_before + 1
    assert task_manager.stats["total"] == 1
    assert task_manager.stats["byStatus"]["pending"] == 1
    task_id = task_manager.tasks[0]["id"]

    # Complete
    assert task_manager.update_task(task_id, {"status": "completed"})
    assert task_manager.tasks[0]["completedAt"] is not None
    assert task_manager.stats["byStatus"] == {"pending": 0, "in-progress": 0, "completed": 1}

    # Delete
    assert task_manager.delete_task(task_id)
    assert task_manager.tasks == []
    assert task_manager.stats["total"] == 0

    assert [message for message, _ in notifications[1:]] == [
        "Task created successfully!",
        "Task updated successfully!",
        "Task deleted successfully!",
    ]


def test_each_mutation_refetches_stats(logged_in, task_manager, api_transport):
    # Arrange
    api_transport.calls.clear()

    # Act
    task_manager.create_task({"title": "One"})
    task_id = task_manager.tasks[0]["id"]
    task_manager.update_task(task_id, {"priority": "high"})
    task_manager.delete_task(task_id)

    # Assert
    assert _stats_fetches(api_transport) == 3


def test_failed_mutation_does_not_refetch_stats(logged_in, task_manager, api_transport, notifications):
    task_manager.create_task({"title": "Existing"})
    tasks_before = list(task_manager.tasks)
    stats_before = dict(task_manager.stats)
    api_transport.calls.clear()

    ok = task_manager.create_task({"title": ""})

    assert ok is False
    assert task_manager.tasks == tasks_before
    assert task_manager.stats == stats_before
    assert _stats_fetches(api_transport) == 0
    assert notifications[-1] == ("Please provide a task title", "error")


def test_fetch_tasks_sends_only_non_empty_filters(logged_in, task_manager, api_transport, user, task_factory):
    # Arrange
    task_factory(user, title="Match", priority="high", category="work")
    task_factory(user, title="Other", priority="low", category="work")
    api_transport.calls.clear()

    # Act
    ok = task_manager.fetch_tasks({"status": "", "priority": "high", "category": "work", "q": "ignored"})

    # Assert
    assert ok is True
    assert [task["title"] for task in task_manager.tasks] == ["Match"]
    assert api_transport.calls[0]["params"] == {"priority": "high", "category": "work"}


def test_update_replaces_only_matching_task(logged_in, task_manager, user, task_factory):
    first = task_factory(user, title="First")
    task_factory(user, title="Second")
    first_id = first.id
    task_manager.fetch_tasks()

    task_manager.update_task(str(first_id), {"title": "First (edited)"})

    assert sorted(task["title"] for task in task_manager.tasks) == ["First (edited)", "Second"]


def test_get_task_returns_none_on_failure(logged_in, task_manager, notifications):
    before = list(notifications)

    assert task_manager.get_task(9999) is None
    assert notifications == before


def test_get_task_does_not_touch_list(logged_in, task_manager, user, task_factory):
    task = task_factory(user, title="Lookup")
    task_id = task.id

    found = task_manager.get_task(task_id)

    assert found["title"] == "Lookup"
    assert task_manager.tasks == []


def test_expired_session_clears_store_on_fetch(task_manager, session_store, notifications, user):
    """Test that a 401 during a fetch logs the user out without a failure message."""
    # Arrange
    session_store.save(create_test_token(user_id=user.id, expired=True), {"id": user.id})

    # Act
    ok = task_manager.fetch_tasks()

    # Assert
    assert ok is False
    assert session_store.session is None
    assert notifications == []


def test_subscribers_notified_on_change(logged_in, task_manager):
    changes = []
    task_manager.subscribe(lambda manager: changes.append(len(manager.tasks)))

    task_manager.create_task({"title": "Watched"})

    # once for the new task, once for the refreshed stats
    assert changes == [1, 1]


def test_recent_tasks_limited_to_five(logged_in, task_manager, user, task_factory):
    for index in range(7):
        task_factory(user, title=f"Task {index}")
    task_manager.fetch_tasks()

    recent = task_manager.recent_tasks()

    assert [task["title"] for task in recent] == [f"Task {index}" for index in range(6, 1, -1)]


def test_build_filter_params_drops_unknown_and_empty():
    assert build_filter_params({"status": "pending", "priority": "", "sort": "title"}) == {
        "status": "pending"
    }
    assert build_filter_params(None) == {}


def test_search_tasks_matches_title_or_description():
    tasks = [
        {"title": "Buy milk", "description": None},
        {"title": "Call Bob", "description": "About the MILK order"},
        {"title": "Write report", "description": "quarterly"},
    ]

    assert [task["title"] for task in search_tasks(tasks, "milk")] == ["Buy milk", "Call Bob"]
    assert search_tasks(tasks, "  ") == tasks
