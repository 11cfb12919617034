"""
Python client for the Taskflow API.

The pieces, leaf first:

* :mod:`.session_store` -- the token + user, persisted and observable.
* :mod:`.api_client`    -- ``requests`` wrapper with explicit credentials.
* :mod:`.auth_session`  -- login, register, logout, restore, profile.
* :mod:`.task_collection` -- task CRUD and the statistics snapshot.
* :mod:`.validation`    -- pure form checks.

``connect`` wires them together from :class:`ClientSettings`.
"""

from __future__ import annotations

from dataclasses import dataclass

from .api_client import ApiClient
from .auth_session import AuthSessionManager
from .events import Notifier
from .exceptions import ApiError, ClientError, SessionExpiredError, TransportError
from .session_store import FileSessionStore, MemorySessionStore, Session, SessionStore
from .settings import ClientSettings
from .task_collection import TaskCollectionManager

__all__ = [
    "ApiClient",
    "ApiError",
    "AuthSessionManager",
    "ClientError",
    "ClientSettings",
    "FileSessionStore",
    "MemorySessionStore",
    "Session",
    "SessionExpiredError",
    "SessionStore",
    "TaskClient",
    "TaskCollectionManager",
    "TransportError",
    "connect",
]


@dataclass
class TaskClient:
    """The two managers sharing one API client and session store."""

    api: ApiClient
    auth: AuthSessionManager
    tasks: TaskCollectionManager


def connect(
    settings: ClientSettings | None = None,
    *,
    store: SessionStore | None = None,
    notify: Notifier | None = None,
    http=None,
) -> TaskClient:
    """
    Build a :class:`TaskClient` and restore any persisted session.

    Args:
        settings: Defaults to :meth:`ClientSettings.from_env`.
        store: Defaults to a :class:`FileSessionStore` at
            ``settings.session_file``.
        notify: Notification callback shared by both managers.
        http: Optional ``requests.Session`` replacement.
    """
    settings = settings or ClientSettings.from_env()
    store = store if store is not None else FileSessionStore(settings.session_file)
    api = ApiClient(settings.api_url, store, timeout=settings.timeout, http=http)
    client = TaskClient(
        api=api,
        auth=AuthSessionManager(api, notify),
        tasks=TaskCollectionManager(api, notify),
    )
    client.auth.restore()
    return client
