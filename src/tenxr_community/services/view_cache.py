"""Read-side cache of rendered views, kept fresh by invalidation signals."""

from __future__ import annotations

import threading
from collections.abc import Callable, Hashable
from typing import Any

from tenxr_community.services.invalidation import InvalidationBus, get_invalidation_bus


class ViewCache:
    """Memoize view payloads by scope until that scope is invalidated.

    A scope may hold several payloads (one per feed page, say) told apart by
    ``key``; invalidating the scope drops all of them.
    """

    def __init__(self, bus: InvalidationBus | None = None) -> None:
        self._entries: dict[str, dict[Hashable, Any]] = {}
        self._lock = threading.Lock()
        self._unsubscribe = (bus or get_invalidation_bus()).subscribe(self.invalidate)

    def get_or_build(self, scope: str, build: Callable[[], Any], key: Hashable = None) -> Any:
        """Return the cached payload for ``scope`` and ``key``, building it on a miss."""
        with self._lock:
            payloads = self._entries.get(scope)
            if payloads is not None and key in payloads:
                return payloads[key]
        value = build()
        with self._lock:
            self._entries.setdefault(scope, {})[key] = value
        return value

    def invalidate(self, scope: str) -> None:
        """Forget every payload held for ``scope``."""
        with self._lock:
            self._entries.pop(scope, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, scope: str) -> bool:
        with self._lock:
            return scope in self._entries

    def close(self) -> None:
        """Stop listening for invalidations."""
        self._unsubscribe()


_view_cache: ViewCache | None = None


def get_view_cache() -> ViewCache:
    """Return the process-wide view cache bound to the default bus."""
    global _view_cache
    if _view_cache is None:
        _view_cache = ViewCache()
    return _view_cache
