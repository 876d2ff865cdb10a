"""Version 1 API endpoints."""

from .endpoints import (
    chat_router,
    communities_router,
    posts_router,
    users_router,
    votes_router,
)

__all__ = [
    "chat_router",
    "communities_router",
    "posts_router",
    "users_router",
    "votes_router",
]
