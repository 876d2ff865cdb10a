"""Post and comment Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .common import ActionResponse


class PostCreate(BaseModel):
    """Schema for creating a text or image post."""

    community_slug: str
    title: str
    content_type: str = Field("text", description="'text' or 'image'")
    content: str | None = Field(None, description="Editor JSON for text posts")
    image_url: str | None = Field(None, description="Uploaded image URL for image posts")


class PostCreated(ActionResponse):
    post_id: str
    community_slug: str


class CommentCreate(BaseModel):
    """Schema for commenting on a post."""

    text: str


class CommentCreated(ActionResponse):
    comment_id: str


class FeedItem(BaseModel):
    """Post entry of a feed page with its net score."""

    id: str
    title: str
    slug: str | None
    content_type: str
    media_url: str | None = None
    community_slug: str
    community_name: str
    author_id: str
    author_username: str | None
    score: int
    comment_count: int
    created_at: str | None


class FeedPageResponse(BaseModel):
    """A page of feed entries and the totals needed to render a pager."""

    items: list[FeedItem]
    total: int
    page: int
    page_size: int
    total_pages: int

    model_config = ConfigDict(from_attributes=True)


class AuthorSummary(BaseModel):
    id: str
    username: str | None
    avatar_url: str | None


class CommunitySummary(BaseModel):
    name: str
    slug: str
    description: str | None


class CommentDetail(BaseModel):
    """A comment as shown under its post."""

    id: str
    content: str
    created_at: datetime | None
    author: AuthorSummary
    score: int
    my_vote: Literal["upvote", "downvote"] | None


class PostDetail(BaseModel):
    """A post page: the post, where it lives, who wrote it and its comments."""

    id: str
    title: str
    slug: str | None
    content: str | None
    content_type: str
    media_url: str | None
    created_at: datetime | None
    community: CommunitySummary
    author: AuthorSummary
    score: int
    my_vote: Literal["upvote", "downvote"] | None
    comments: list[CommentDetail]
