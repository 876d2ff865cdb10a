"""Post-related endpoints for the 10xR API."""

from fastapi import APIRouter, Query, status

from tenxr_community.schemas.post import (
    CommentCreate,
    CommentCreated,
    FeedPageResponse,
    PostCreate,
    PostCreated,
    PostDetail,
)
from tenxr_community.services import invalidation, post_service

from ..dependencies import (
    CurrentUserDep,
    InvalidationBusDep,
    OptionalUserDep,
    SessionDep,
    ViewCacheDep,
)

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("/", response_model=PostCreated, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    bus: InvalidationBusDep,
) -> PostCreated:
    """Create a text or image post in a community."""
    post = post_service.create_post(
        db,
        current_user,
        community_slug=post_data.community_slug,
        title=post_data.title,
        content_type=post_data.content_type,
        content=post_data.content,
        image_url=post_data.image_url,
        bus=bus,
    )
    return PostCreated(
        status="success",
        message="Post created!",
        post_id=post.id,
        community_slug=post_data.community_slug,
    )


@router.get("/feed", response_model=FeedPageResponse)
async def get_home_feed(
    db: SessionDep,
    cache: ViewCacheDep,
    page: int = Query(1, description="1-based page number; out-of-range values show page 1"),
) -> FeedPageResponse:
    """Return one page of the newest posts with their scores.

    Pages are cached until a vote or new post invalidates the home feed.
    """
    feed_page = cache.get_or_build(
        invalidation.HOME_FEED,
        lambda: post_service.home_feed(db, page=page),
        key=page,
    )
    return FeedPageResponse.model_validate(feed_page)


@router.post(
    "/{post_id}/comments",
    response_model=CommentCreated,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: str,
    comment_data: CommentCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    bus: InvalidationBusDep,
) -> CommentCreated:
    """Comment on a post."""
    comment = post_service.create_comment(
        db,
        current_user,
        post_id=post_id,
        text=comment_data.text,
        bus=bus,
    )
    return CommentCreated(status="success", message="Comment posted!", comment_id=comment.id)


@router.get("/{post_id}", response_model=PostDetail)
async def get_post(post_id: str, db: SessionDep, viewer: OptionalUserDep) -> dict:
    """Return a post page with its comments; stances are filled in for signed-in readers."""
    return post_service.post_detail(db, post_id, viewer_id=viewer.id if viewer else None)
