"""
Authentication session manager.

Owns the :class:`SessionStore`: login and registration save a token and
user, logout and failed restores clear them.  Every public operation
resolves to a boolean and reports the outcome through the notifier; none of
them raises.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .api_client import ApiClient
from .events import Notifier, log_notifier
from .exceptions import ApiError, ClientError, SessionExpiredError
from .session_store import Session, SessionStore

logger = logging.getLogger(__name__)


class AuthSessionManager:
    """
    Login/register/logout/profile operations on top of an :class:`ApiClient`.

    Args:
        api: Client used for every request.  Its session store is the one
            this manager mutates.
        notify: ``notify(message, category)`` callback, ``category`` being
            ``"success"`` or ``"error"``.  Defaults to logging.
    """

    def __init__(self, api: ApiClient, notify: Notifier | None = None) -> None:
        self.api = api
        self.notify = notify or log_notifier
        self.loading = False

    @property
    def store(self) -> SessionStore:
        return self.api.session_store

    @property
    def user(self) -> dict[str, Any] | None:
        return self.store.user

    @property
    def token(self) -> str | None:
        return self.store.token

    @property
    def is_authenticated(self) -> bool:
        return self.store.token is not None and self.store.user is not None

    def subscribe(self, callback: Callable[[Session | None], Any]) -> Callable[[], None]:
        """Forward to the store: *callback* runs on every login, logout or expiry."""
        return self.store.subscribe(callback)

    def restore(self) -> bool:
        """
        Resolve the stored token into a user.

        Without a token this is a no-op returning ``False``.  Any failure
        (expired token, deleted account, unreachable API) clears the token
        and leaves the session unauthenticated.
        """
        if not self.store.token:
            return False

        self.loading = True
        try:
            payload = self.api.get("/auth/me")
            user = payload.get("user")
            if not isinstance(user, dict):
                raise ApiError("Malformed profile response", 200, payload)
            self.store.set_user(user)
            return True
        except ClientError as exc:
            logger.warning("Session restore failed: %s", exc)
            self.store.clear()
            return False
        finally:
            self.loading = False

    def login(self, email: str, password: str) -> bool:
        """Authenticate with email and password."""
        return self._authenticate(
            "/auth/login",
            {"email": email, "password": password},
            success_message="Login successful!",
            failure_message="Login failed",
        )

    def register(self, name: str, email: str, password: str) -> bool:
        """Create an account; on success the new user is logged in."""
        return self._authenticate(
            "/auth/register",
            {"name": name, "email": email, "password": password},
            success_message="Registration successful!",
            failure_message="Registration failed",
        )

    def logout(self) -> None:
        """Forget the token and user.  No request is sent."""
        self.store.clear()
        self.notify("Logged out successfully", "success")

    def update_profile(self, name: str | None = None, email: str | None = None) -> bool:
        """Send a partial profile update; only the supplied fields are changed."""
        data = {key: value for key, value in (("name", name), ("email", email)) if value is not None}
        try:
            payload = self.api.put("/auth/profile", json=data)
        except SessionExpiredError:
            logger.info("Profile update stopped: session expired")
            return False
        except ApiError as exc:
            self.notify(exc.message or "Profile update failed", "error")
            return False
        except ClientError:
            self.notify("Profile update failed", "error")
            return False

        user = payload.get("user")
        if not isinstance(user, dict):
            self.notify("Profile update failed", "error")
            return False
        self.store.set_user(user)
        self.notify("Profile updated successfully!", "success")
        return True

    def _authenticate(
        self,
        path: str,
        body: dict[str, str],
        *,
        success_message: str,
        failure_message: str,
    ) -> bool:
        try:
            payload = self.api.post(path, json=body, authenticated=False)
        except ApiError as exc:
            self.notify(exc.message or failure_message, "error")
            return False
        except ClientError:
            self.notify(failure_message, "error")
            return False

        token = payload.get("token")
        user = payload.get("user")
        if not isinstance(token, str) or not token or not isinstance(user, dict):
            self.notify(failure_message, "error")
            return False

        self.store.save(token, user)
        logger.debug("Authenticated as user %s", user.get("id"))
        self.notify(success_message, "success")
        return True
