"""
Session storage for the task client.

A session is a bearer token plus the user profile it resolved to.  The
store holds at most one session, persists it in local client storage so a
restart can restore it, and publishes every change to its subscribers.

Backends:
    * :class:`MemorySessionStore` -- process memory only (tests, scripts).
    * :class:`FileSessionStore`   -- a JSON file, the desktop analogue of
      browser local storage.

The web views add a third backend on top of the Flask session cookie
(``frontend_app.session.CookieSessionStore``).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .events import Subscribers

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """An authenticated session: the token and the user it belongs to."""

    token: str
    user: dict[str, Any] | None = None


class SessionStore:
    """
    Base store: in-memory state, change notification, persistence hooks.

    Subclasses implement ``_load`` and ``_persist``; everything else is
    shared.  ``clear`` is idempotent and always notifies.
    """

    def __init__(self) -> None:
        self._subscribers: Subscribers[Session | None] = Subscribers()
        self._session: Session | None = self._load()

    # -- persistence hooks ------------------------------------------------

    def _load(self) -> Session | None:
        return None

    def _persist(self, session: Session | None) -> None:
        return None

    # -- state ------------------------------------------------------------

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def token(self) -> str | None:
        return self._session.token if self._session else None

    @property
    def user(self) -> dict[str, Any] | None:
        return self._session.user if self._session else None

    def save(self, token: str, user: dict[str, Any] | None = None) -> None:
        """Replace the stored session with *token* and *user*."""
        if not token:
            raise ValueError("token must be a non-empty string")
        self._set(Session(token=token, user=user))

    def set_user(self, user: dict[str, Any]) -> None:
        """Replace the user of the current session, keeping its token."""
        if self._session is None:
            raise RuntimeError("Cannot set a user without a stored token")
        self._set(Session(token=self._session.token, user=user))

    def clear(self) -> None:
        """Drop the token and user."""
        self._set(None)

    def subscribe(self, callback: Callable[[Session | None], Any]) -> Callable[[], None]:
        """Register *callback* for every session change; returns an unsubscribe function."""
        return self._subscribers.subscribe(callback)

    def _set(self, session: Session | None) -> None:
        self._session = session
        self._persist(session)
        self._subscribers.publish(session)


class MemorySessionStore(SessionStore):
    """Session store that lives only as long as the process."""

    def __init__(self, token: str | None = None, user: dict[str, Any] | None = None) -> None:
        self._initial = Session(token=token, user=user) if token else None
        super().__init__()

    def _load(self) -> Session | None:
        return self._initial


class FileSessionStore(SessionStore):
    """
    Session store persisted as JSON at *path*.

    An unreadable or malformed file is treated as "no session" rather than
    an error: the user simply has to log in again.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()
        super().__init__()

    def _load(self) -> Session | None:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            return None

        token = raw.get("token") if isinstance(raw, dict) else None
        if not isinstance(token, str) or not token:
            return None
        user = raw.get("user")
        return Session(token=token, user=user if isinstance(user, dict) else None)

    def _persist(self, session: Session | None) -> None:
        if session is None:
            self.path.unlink(missing_ok=True)
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps({"token": session.token, "user": session.user}),
            encoding="utf-8",
        )
