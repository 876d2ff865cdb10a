"""Business logic services for the 10xR community platform."""

from .invalidation import InvalidationBus, get_invalidation_bus
from .view_cache import ViewCache, get_view_cache

__all__ = [
    "InvalidationBus",
    "ViewCache",
    "get_invalidation_bus",
    "get_view_cache",
]
