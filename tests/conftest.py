"""
Shared pytest fixtures for the Taskflow test suite.

Provides the API application, its test client, a per-test database, data
factories for users and tasks, and the in-process wiring that lets the
task client and the web views talk to the real API without a server.

Key Concepts Demonstrated:
- Session-scoped vs function-scoped fixtures for performance and isolation
- Factory pattern (user_factory, task_factory) for flexible test data
- In-memory RSA keys injected through environment variables
- An in-process transport in place of live HTTP
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from faker import Faker

from shared.test_helpers import (
    DEFAULT_TEST_PASSWORD,
    TEST_PRIVATE_KEY,
    TEST_PUBLIC_KEY,
    FlaskTestTransport,
    auth_headers,
    create_test_token,
)

# Set testing environment before importing the apps
os.environ["FLASK_ENV"] = "testing"
os.environ["TEST_JWT_PRIVATE_KEY"] = TEST_PRIVATE_KEY
os.environ["TEST_JWT_PUBLIC_KEY"] = TEST_PUBLIC_KEY

from api_app import create_app, db
from api_app.models import Task, TaskPriority, TaskStatus, User
from frontend_app import create_app as create_frontend_app
from task_client import ApiClient, AuthSessionManager, MemorySessionStore, TaskCollectionManager

fake = Faker()

DEFAULT_PASSWORD = DEFAULT_TEST_PASSWORD


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture(scope="session")
def app():
    """
    Provide the API application for the entire test session.

    Created once with the 'testing' configuration and reused by every test.
    """
    application = create_app("testing")
    yield application


@pytest.fixture(scope="function")
def client(app):
    """Provide a test client for the API, fresh for every test."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(app):
    """
    Provide a clean database for each test function.

    Creates all tables before the test, then rolls back any uncommitted
    changes and drops every table so the next test starts empty.
    """
    with app.app_context():
        db.create_all()
        yield db
        db.session.rollback()
        db.drop_all()


@pytest.fixture(scope="session")
def api_transport(app) -> FlaskTestTransport:
    """Route ``requests``-style calls into the API app in-process."""
    return FlaskTestTransport(app)


@pytest.fixture(scope="session")
def web_app(api_transport):
    """The web views application wired to the in-process API."""
    return create_frontend_app("testing", http=api_transport)


@pytest.fixture(scope="function")
def web_client(web_app, api_transport, db_session):
    """
    Test client for the web views.

    Depends on ``db_session`` because every page reaches the API database.
    Not opened as a context manager: a preserved web request context would
    shadow the API app context that ``db_session`` pushed.
    """
    api_transport.calls.clear()
    return web_app.test_client()


# -----------------------------------------------------------------------------
# Test Data Factory Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def user_factory(db_session):
    """
    Factory fixture that creates User rows.

    Every user gets the same known password (``DEFAULT_PASSWORD``) unless
    one is given, so tests can log in as them.
    """

    def _create_user(
        *,
        name: str | None = None,
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        user = User(
            name=name or fake.name()[:50],
            email=(email or fake.unique.email()).lower(),
        )
        user.set_password(password)
        db_session.session.add(user)
        db_session.session.commit()
        return user

    return _create_user


@pytest.fixture
def task_factory(db_session):
    """
    Factory fixture that creates Task rows owned by *user*.

    Example:
        def test_something(user, task_factory):
            task = task_factory(user, title="My Task")
            assert task.id is not None
    """

    def _create_task(
        user: User,
        *,
        title: str | None = None,
        description: str | None = None,
        status: str = TaskStatus.PENDING.value,
        priority: str = TaskPriority.MEDIUM.value,
        due_date: datetime | None = None,
        category: str | None = None,
    ) -> Task:
        task = Task(
            user_id=user.id,
            title=title or fake.sentence(nb_words=4)[:100],
            description=description,
            priority=priority,
            due_date=due_date,
            category=category,
        )
        task.set_status(status)
        db_session.session.add(task)
        db_session.session.commit()
        return task

    return _create_task


@pytest.fixture
def user(user_factory) -> User:
    """A single registered user with the default password."""
    return user_factory(name="Test User", email="test.user@example.com")


@pytest.fixture
def other_user(user_factory) -> User:
    """A second user for ownership-isolation tests."""
    return user_factory(name="Other User", email="other.user@example.com")


@pytest.fixture
def api_headers(user) -> dict[str, str]:
    """Bearer headers for ``user``."""
    return auth_headers(create_test_token(user_id=user.id))


@pytest.fixture
def other_user_headers(other_user) -> dict[str, str]:
    """Bearer headers for ``other_user``."""
    return auth_headers(create_test_token(user_id=other_user.id))


@pytest.fixture
def multiple_tasks(user, task_factory) -> list[Task]:
    """
    Four tasks for ``user`` with varied status, priority and category.

    Useful for filter and statistics tests.
    """
    now = datetime.now(timezone.utc)
    return [
        task_factory(
            user,
            title="High Priority Pending",
            status=TaskStatus.PENDING.value,
            priority=TaskPriority.HIGH.value,
            category="work",
            due_date=now + timedelta(days=1),
        ),
        task_factory(
            user,
            title="Medium Priority In Progress",
            status=TaskStatus.IN_PROGRESS.value,
            priority=TaskPriority.MEDIUM.value,
            category="home",
        ),
        task_factory(
            user,
            title="Low Priority Completed",
            status=TaskStatus.COMPLETED.value,
            priority=TaskPriority.LOW.value,
            category="work",
        ),
        task_factory(
            user,
            title="High Priority In Progress",
            status=TaskStatus.IN_PROGRESS.value,
            priority=TaskPriority.HIGH.value,
            category="work",
            due_date=now + timedelta(days=7),
        ),
    ]


# -----------------------------------------------------------------------------
# Client Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def notifications() -> list[tuple[str, str]]:
    """Collects ``(message, category)`` pairs sent to a manager's notifier."""
    return []


@pytest.fixture
def session_store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def api_client(app, db_session, api_transport, session_store) -> ApiClient:
    """An :class:`ApiClient` against the in-process API."""
    return ApiClient(
        app.config["API_BASE_URL"],
        session_store,
        timeout=app.config["API_TIMEOUT"],
        http=api_transport,
    )


@pytest.fixture
def auth_manager(api_client, notifications) -> AuthSessionManager:
    return AuthSessionManager(api_client, lambda message, category: notifications.append((message, category)))


@pytest.fixture
def task_manager(api_client, notifications) -> TaskCollectionManager:
    return TaskCollectionManager(api_client, lambda message, category: notifications.append((message, category)))


@pytest.fixture
def logged_in(auth_manager, user) -> AuthSessionManager:
    """``auth_manager`` after a successful login as ``user``."""
    assert auth_manager.login(user.email, DEFAULT_PASSWORD)
    return auth_manager


# -----------------------------------------------------------------------------
# Test Data Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def valid_task_data() -> dict[str, Any]:
    """Valid task payload for POST/PUT requests."""
    return {
        "title": "Test Task",
        "description": "This is a test task description",
        "status": TaskStatus.PENDING.value,
        "priority": TaskPriority.MEDIUM.value,
        "dueDate": (datetime.now(timezone.utc) + timedelta(days=7)).isoformat(),
        "category": "work",
    }
