"""Helpers for reading and updating user profiles."""
from __future__ import annotations

import re
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tenxr_community.core.exceptions import Conflict, InvalidInput
from tenxr_community.models.user import User
from tenxr_community.services import invalidation
from tenxr_community.services.invalidation import InvalidationBus, get_invalidation_bus
from tenxr_community.services.persistence import persistence_errors

__all__ = [
    "UsernameChange",
    "get_user",
    "get_user_by_auth_id",
    "search_users",
    "update_username",
]

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20
USERNAME_PATTERN = re.compile(r"^[a-z0-9_-]+$")
SEARCH_LIMIT = 10
_TAKEN_MESSAGE = "This username is already taken. Please choose another."


@dataclass(frozen=True)
class UsernameChange:
    """Outcome of a username update request."""

    user: User
    changed: bool


def get_user(db: Session, user_id: str) -> User | None:
    """Return a single user by primary key."""
    return db.get(User, user_id)


def get_user_by_auth_id(db: Session, auth_user_id: str) -> User | None:
    """Return the profile linked to an auth service subject."""
    return db.query(User).filter(User.auth_user_id == auth_user_id).first()


def search_users(
    db: Session,
    query: str | None,
    *,
    exclude_user_id: str | None = None,
    limit: int = SEARCH_LIMIT,
) -> list[User]:
    """Find users whose username contains ``query``, ignoring case.

    Used to pick the other side of a direct conversation; ``exclude_user_id``
    keeps the caller out of the results. A blank query matches nobody.
    """
    term = (query or "").strip()
    if not term:
        return []
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    with persistence_errors(db, "search_users"):
        lookup = db.query(User).filter(User.username.ilike(f"%{escaped}%", escape="\\"))
        if exclude_user_id:
            lookup = lookup.filter(User.id != exclude_user_id)
        return lookup.order_by(User.username).limit(limit).all()


def normalize_username(raw: str | None) -> str:
    """Validate and normalize a requested username.

    Raises:
        InvalidInput: If the name is empty, too short/long or has bad characters.
    """
    if raw is None or not raw.strip():
        raise InvalidInput("Username is required.")
    username = raw.lower().strip()
    if len(username) < USERNAME_MIN_LENGTH:
        raise InvalidInput(f"Username must be at least {USERNAME_MIN_LENGTH} characters long.")
    if len(username) > USERNAME_MAX_LENGTH:
        raise InvalidInput(f"Username must be no more than {USERNAME_MAX_LENGTH} characters.")
    if not USERNAME_PATTERN.match(username):
        raise InvalidInput(
            "Username can only contain letters, numbers, underscores, and hyphens."
        )
    return username


def update_username(
    db: Session,
    user: User,
    raw_username: str | None,
    *,
    bus: InvalidationBus | None = None,
) -> UsernameChange:
    """Change ``user``'s username if it is free.

    Raises:
        InvalidInput: If the username fails validation.
        Conflict: If another user already holds the name.
    """
    username = normalize_username(raw_username)
    if user.username == username:
        return UsernameChange(user=user, changed=False)

    with persistence_errors(db, "update_username"):
        holder = db.query(User.id).filter(User.username == username).first()
        if holder is not None and holder.id != user.id:
            raise Conflict(_TAKEN_MESSAGE)

        user.username = username
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise Conflict(_TAKEN_MESSAGE) from exc
        db.refresh(user)

    (bus or get_invalidation_bus()).publish(invalidation.SETTINGS, invalidation.PROFILE)
    return UsernameChange(user=user, changed=True)
