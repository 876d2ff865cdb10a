"""Community creation and maintenance."""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tenxr_community.core.exceptions import Conflict, Forbidden, InvalidInput, NotFound
from tenxr_community.core.settings import settings
from tenxr_community.models import Community, User
from tenxr_community.services import invalidation
from tenxr_community.services.invalidation import InvalidationBus, get_invalidation_bus
from tenxr_community.services.persistence import persistence_errors
from tenxr_community.services.slugs import is_valid_slug, slugify

logger = logging.getLogger(__name__)

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 50


def get_community_by_slug(db: Session, slug: str) -> Community | None:
    return db.query(Community).filter(Community.slug == slug).first()


def create_community(
    db: Session,
    creator: User,
    raw_name: str | None,
    *,
    bus: InvalidationBus | None = None,
) -> Community:
    """Create a community named ``raw_name`` owned by ``creator``.

    Raises:
        InvalidInput: If the name is empty, out of bounds or yields no usable slug.
        Conflict: If the name or its slug is already taken.
    """
    name = (raw_name or "").strip()
    if not name:
        raise InvalidInput("Community name is required.")
    if len(name) < NAME_MIN_LENGTH:
        raise InvalidInput(f"Community name must be at least {NAME_MIN_LENGTH} characters long.")
    if len(name) > NAME_MAX_LENGTH:
        raise InvalidInput(f"Community name must be no more than {NAME_MAX_LENGTH} characters.")

    slug = slugify(name)
    if not is_valid_slug(slug):
        raise InvalidInput(
            "Community name can only contain letters, numbers, spaces, and hyphens."
        )

    with persistence_errors(db, "create_community"):
        if db.query(Community.id).filter(Community.name == name).first():
            raise Conflict("A community with this name already exists.")
        if get_community_by_slug(db, slug) is not None:
            raise Conflict(
                "A community with this URL already exists. Please try a different name."
            )

        community = Community(name=name, slug=slug, created_by=creator.id)
        db.add(community)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise Conflict("A community with this name already exists.") from exc
        db.refresh(community)

    logger.info("Community %s created by %s", community.slug, creator.id)
    (bus or get_invalidation_bus()).publish(invalidation.HOME_FEED)
    return community


def update_description(
    db: Session,
    editor: User,
    slug: str | None,
    raw_description: str | None,
    *,
    bus: InvalidationBus | None = None,
) -> Community:
    """Replace a community's description; only its creator may do so.

    An empty description clears the field.
    """
    if not slug:
        raise InvalidInput("Community identifier is required.")

    description = (raw_description or "").strip()
    limit = settings.description_max_length
    if len(description) > limit:
        raise InvalidInput(f"Description must be no more than {limit} characters.")

    with persistence_errors(db, "update_description"):
        community = get_community_by_slug(db, slug)
        if community is None:
            raise NotFound("Community not found.")
        if community.created_by != editor.id:
            raise Forbidden("You are not authorized to edit this community.")

        community.description = description or None
        db.commit()
        db.refresh(community)

    (bus or get_invalidation_bus()).publish(invalidation.community(slug))
    return community
