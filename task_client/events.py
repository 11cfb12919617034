"""Change notification helpers shared by the session store and the managers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ``notify(message, category)`` -- same argument order as ``flask.flash``.
Notifier = Callable[[str, str], None]


def log_notifier(message: str, category: str) -> None:
    """Default notifier: write user-facing notifications to the log."""
    if category == "error":
        logger.warning("%s", message)
    else:
        logger.info("%s", message)


class Subscribers(Generic[T]):
    """
    A list of callbacks invoked with the owner's new state.

    ``subscribe`` returns an unsubscribe function.  A callback that raises
    is logged and skipped so one broken listener cannot stop the others.
    """

    def __init__(self) -> None:
        self._callbacks: list[Callable[[T], Any]] = []

    def subscribe(self, callback: Callable[[T], Any]) -> Callable[[], None]:
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def publish(self, value: T) -> None:
        for callback in list(self._callbacks):
            try:
                callback(value)
            except Exception:
                logger.exception("Subscriber %r failed", callback)

    def __len__(self) -> int:
        return len(self._callbacks)
