"""Service-level helpers for posts, comments and the home feed."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from tenxr_community.core.exceptions import InvalidInput, NotFound
from tenxr_community.core.settings import settings
from tenxr_community.models import Comment, Community, Post, User, VotableType, Vote, VoteType
from tenxr_community.models.post import CONTENT_TYPE_IMAGE, CONTENT_TYPE_TEXT
from tenxr_community.services import invalidation
from tenxr_community.services.community_service import get_community_by_slug
from tenxr_community.services.invalidation import InvalidationBus, get_invalidation_bus
from tenxr_community.services.persistence import persistence_errors
from tenxr_community.services.slugs import slugify
from tenxr_community.services.vote_ledger import my_vote, score_for, scores_for

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 300
POST_SLUG_MAX_LENGTH = 100
CONTENT_TYPES = (CONTENT_TYPE_TEXT, CONTENT_TYPE_IMAGE)
FEED_PAGE_SIZE = 10


def get_post(db: Session, post_id: str) -> Post | None:
    """Return a visible post by id."""
    return db.query(Post).filter(Post.id == post_id, Post.is_removed.is_(False)).first()


def create_post(
    db: Session,
    author: User,
    *,
    community_slug: str | None,
    title: str | None,
    content_type: str | None,
    content: str | None = None,
    image_url: str | None = None,
    bus: InvalidationBus | None = None,
) -> Post:
    """Create a text or image post in a community.

    Args:
        db: Database session.
        author: Authenticated author.
        community_slug: Slug of the target community.
        title: Post title; trimmed, 3 to 300 characters.
        content_type: ``"text"`` or ``"image"``.
        content: Editor JSON, required for text posts.
        image_url: Uploaded image location, required for image posts.
        bus: Invalidation bus notified after the commit.

    Raises:
        InvalidInput: If any field fails validation.
        NotFound: If the community does not exist.
    """
    if not community_slug:
        raise InvalidInput("Community identifier is required.")
    cleaned_title = (title or "").strip()
    if not cleaned_title:
        raise InvalidInput("Post title is required.")
    if len(cleaned_title) < TITLE_MIN_LENGTH:
        raise InvalidInput(f"Title must be at least {TITLE_MIN_LENGTH} characters long.")
    if len(cleaned_title) > TITLE_MAX_LENGTH:
        raise InvalidInput(f"Title must be no more than {TITLE_MAX_LENGTH} characters.")
    if content_type not in CONTENT_TYPES:
        raise InvalidInput("Invalid post type.")
    if content_type == CONTENT_TYPE_TEXT and not content:
        raise InvalidInput("Post content is required for text posts.")
    if content_type == CONTENT_TYPE_IMAGE and not image_url:
        raise InvalidInput("Image is required for image posts.")

    with persistence_errors(db, "create_post"):
        community = get_community_by_slug(db, community_slug)
        if community is None:
            raise NotFound("Community not found.")

        post = Post(
            title=cleaned_title,
            content=content if content_type == CONTENT_TYPE_TEXT else None,
            content_type=content_type,
            media_url=image_url if content_type == CONTENT_TYPE_IMAGE else None,
            author_id=author.id,
            community_id=community.id,
            slug=slugify(cleaned_title, POST_SLUG_MAX_LENGTH),
        )
        db.add(post)
        db.commit()
        db.refresh(post)

    (bus or get_invalidation_bus()).publish(
        invalidation.community(community_slug),
        invalidation.HOME_FEED,
    )
    return post


def create_comment(
    db: Session,
    author: User,
    *,
    post_id: str | None,
    text: str | None,
    bus: InvalidationBus | None = None,
) -> Comment:
    """Attach a comment to an existing post."""
    if not post_id:
        raise InvalidInput("Post ID is required.")
    cleaned = (text or "").strip()
    if not cleaned:
        raise InvalidInput("Comment text is required.")
    limit = settings.comment_max_length
    if len(cleaned) > limit:
        raise InvalidInput(f"Comment is too long (max {limit:,} characters).")

    with persistence_errors(db, "create_comment"):
        if get_post(db, post_id) is None:
            raise NotFound("Post not found.")
        comment = Comment(content=cleaned, post_id=post_id, author_id=author.id)
        db.add(comment)
        db.commit()
        db.refresh(comment)

    # Feed entries show comment counts.
    (bus or get_invalidation_bus()).publish(invalidation.post(post_id), invalidation.HOME_FEED)
    return comment


@dataclass(frozen=True)
class FeedPage:
    """One page of posts plus the total the pager needs."""

    items: list[dict[str, Any]]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total / self.page_size))


def _feed_query(db: Session):  # type: ignore[no-untyped-def]
    return (
        db.query(Post, Community.slug, Community.name, User.username)
        .join(Community, Community.id == Post.community_id)
        .join(User, User.id == Post.author_id)
        .filter(Post.is_removed.is_(False))
    )


def _comment_counts(db: Session, post_ids: list[str]) -> dict[str, int]:
    if not post_ids:
        return {}
    rows = (
        db.query(Comment.post_id, func.count(Comment.id))
        .filter(Comment.post_id.in_(post_ids), Comment.is_removed.is_(False))
        .group_by(Comment.post_id)
        .all()
    )
    return {post_id: int(total) for post_id, total in rows}


def _paginate(db: Session, query, page: int | None, page_size: int, operation: str) -> FeedPage:  # type: ignore[no-untyped-def]
    # Out-of-range page numbers fall back to the first page.
    page = page if page and page > 0 else 1
    with persistence_errors(db, operation):
        total = query.order_by(None).count()
        rows = (
            query.order_by(desc(Post.created_at))
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        post_ids = [post.id for post, *_ in rows]
        scores = scores_for(db, post_ids, VotableType.POST)
        comment_counts = _comment_counts(db, post_ids)

    items = [
        {
            "id": post.id,
            "title": post.title,
            "slug": post.slug,
            "content_type": post.content_type,
            "media_url": post.media_url,
            "community_slug": community_slug,
            "community_name": community_name,
            "author_id": post.author_id,
            "author_username": author_username,
            "score": scores.get(post.id, 0),
            "comment_count": comment_counts.get(post.id, 0),
            "created_at": post.created_at.isoformat() if post.created_at else None,
        }
        for post, community_slug, community_name, author_username in rows
    ]
    return FeedPage(items=items, total=total, page=page, page_size=page_size)


def home_feed(db: Session, page: int | None = 1, page_size: int = FEED_PAGE_SIZE) -> FeedPage:
    """Return one page of the newest visible posts with their scores."""
    return _paginate(db, _feed_query(db), page, page_size, "home_feed")


def community_feed(
    db: Session,
    slug: str,
    page: int | None = 1,
    page_size: int = FEED_PAGE_SIZE,
) -> FeedPage:
    """Return one page of a community's posts, newest first.

    Raises:
        NotFound: If no community has this slug.
    """
    community = get_community_by_slug(db, slug)
    if community is None:
        raise NotFound("Community not found.")
    query = _feed_query(db).filter(Post.community_id == community.id)
    return _paginate(db, query, page, page_size, "community_feed")


def _author(user: User) -> dict[str, Any]:
    return {"id": user.id, "username": user.username, "avatar_url": user.avatar_url}


def post_detail(db: Session, post_id: str, viewer_id: str | None = None) -> dict[str, Any]:
    """Return a post with its community, author, score and comments.

    ``my_vote`` fields carry the viewer's stance and are None for anonymous
    readers. Comments are listed oldest first.

    Raises:
        NotFound: If the post does not exist or was removed.
    """
    with persistence_errors(db, "post_detail"):
        row = (
            db.query(Post, Community, User)
            .join(Community, Community.id == Post.community_id)
            .join(User, User.id == Post.author_id)
            .filter(Post.id == post_id, Post.is_removed.is_(False))
            .first()
        )
        if row is None:
            raise NotFound("Post not found.")
        post, community, author = row

        comments = (
            db.query(Comment, User)
            .join(User, User.id == Comment.author_id)
            .filter(Comment.post_id == post.id, Comment.is_removed.is_(False))
            .order_by(Comment.created_at.asc())
            .all()
        )
        comment_ids = [comment.id for comment, _ in comments]
        comment_scores = scores_for(db, comment_ids, VotableType.COMMENT)

        stances: dict[str, VoteType] = {}
        if viewer_id and comment_ids:
            rows = db.query(Vote.votable_id, Vote.vote_type).filter(
                Vote.user_id == viewer_id,
                Vote.votable_type == VotableType.COMMENT,
                Vote.votable_id.in_(comment_ids),
            )
            stances = dict(rows.all())
        post_stance = my_vote(db, viewer_id, post.id) if viewer_id else None
        score = score_for(db, post.id)

    return {
        "id": post.id,
        "title": post.title,
        "slug": post.slug,
        "content": post.content,
        "content_type": post.content_type,
        "media_url": post.media_url,
        "created_at": post.created_at,
        "community": {
            "name": community.name,
            "slug": community.slug,
            "description": community.description,
        },
        "author": _author(author),
        "score": score,
        "my_vote": post_stance.value if post_stance else None,
        "comments": [
            {
                "id": comment.id,
                "content": comment.content,
                "created_at": comment.created_at,
                "author": _author(commenter),
                "score": comment_scores.get(comment.id, 0),
                "my_vote": stances[comment.id].value if comment.id in stances else None,
            }
            for comment, commenter in comments
        ],
    }
