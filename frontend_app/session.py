"""Session store backed by the signed Flask session cookie."""

from __future__ import annotations

from flask import session

from task_client.session_store import Session, SessionStore

SESSION_KEY = "auth"


class CookieSessionStore(SessionStore):
    """
    Keep the token and user in ``flask.session[SESSION_KEY]``.

    Must be created inside a request context; each request builds its own
    store so the cookie is the only state carried between requests.
    """

    def _load(self) -> Session | None:
        raw = session.get(SESSION_KEY)
        if not isinstance(raw, dict) or not raw.get("token"):
            return None
        return Session(token=raw["token"], user=raw.get("user"))

    def _persist(self, value: Session | None) -> None:
        if value is None:
            session.pop(SESSION_KEY, None)
            return
        session[SESSION_KEY] = {"token": value.token, "user": value.user}
