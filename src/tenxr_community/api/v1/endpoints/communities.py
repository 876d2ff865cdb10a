"""Community-related endpoints for the 10xR API."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from tenxr_community.core.exceptions import NotFound
from tenxr_community.models import Community
from tenxr_community.schemas.community import (
    CommunityCreate,
    CommunityDescriptionUpdate,
    CommunityResponse,
)
from tenxr_community.schemas.post import FeedPageResponse
from tenxr_community.services import community_service, post_service

from ..dependencies import CurrentUserDep, InvalidationBusDep, SessionDep

router = APIRouter(prefix="/communities", tags=["communities"])


@router.post("/", response_model=CommunityResponse, status_code=status.HTTP_201_CREATED)
async def create_community(
    community_data: CommunityCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    bus: InvalidationBusDep,
) -> Community:
    """Create a new community owned by the caller."""
    return community_service.create_community(db, current_user, community_data.name, bus=bus)


@router.get("/{slug}", response_model=CommunityResponse)
async def get_community(slug: str, db: SessionDep) -> Community:
    """Get a community by its slug."""
    community = community_service.get_community_by_slug(db, slug)
    if community is None:
        raise NotFound("Community not found.")
    return community


@router.put("/{slug}/description", response_model=CommunityResponse)
async def update_description(
    slug: str,
    update: CommunityDescriptionUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
    bus: InvalidationBusDep,
) -> Community:
    """Replace the community description; creator only."""
    return community_service.update_description(
        db,
        current_user,
        slug,
        update.description,
        bus=bus,
    )


@router.get("/{slug}/posts", response_model=FeedPageResponse)
async def list_community_posts(
    slug: str,
    db: SessionDep,
    page: int = Query(1, description="1-based page number; out-of-range values show page 1"),
) -> FeedPageResponse:
    """Return one page of the community's posts, newest first."""
    return FeedPageResponse.model_validate(post_service.community_feed(db, slug, page=page))
