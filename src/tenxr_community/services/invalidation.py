"""Invalidation signals emitted after successful mutations.

Mutating services publish the *scope* of every view their write made stale
(the home feed, one user's conversation list, a chat room, ...). Read-side
caches subscribe and drop whatever they hold for that scope, so the next
access recomputes from the database.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Final

logger = logging.getLogger(__name__)

HOME_FEED: Final[str] = "home_feed"
SETTINGS: Final[str] = "settings"
PROFILE: Final[str] = "profile"

Listener = Callable[[str], None]


def conversations(user_id: str) -> str:
    """Scope covering one user's list of chat rooms."""
    return f"conversations:{user_id}"


def chat_room(room_id: str) -> str:
    """Scope covering the message history of one room."""
    return f"chat_room:{room_id}"


def community(slug: str) -> str:
    """Scope covering a community page."""
    return f"community:{slug}"


def post(post_id: str) -> str:
    """Scope covering a post page and its comments."""
    return f"post:{post_id}"


class InvalidationBus:
    """Fan-out of invalidated scopes to registered listeners."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def publish(self, *scopes: str) -> None:
        """Notify every listener that ``scopes`` are stale."""
        with self._lock:
            listeners = list(self._listeners)
        for scope in scopes:
            logger.debug("Invalidating scope %s", scope)
            for listener in listeners:
                try:
                    listener(scope)
                except Exception:
                    logger.exception("Invalidation listener failed for scope %s", scope)


_bus = InvalidationBus()


def get_invalidation_bus() -> InvalidationBus:
    """Return the process-wide invalidation bus."""
    return _bus
