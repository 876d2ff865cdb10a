"""SQLAlchemy models for posts and their comments."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tenxr_community.db.session import Base
from tenxr_community.db.time import utcnow

from .ids import ID_LENGTH, new_id

CONTENT_TYPE_TEXT = "text"
CONTENT_TYPE_IMAGE = "image"


class Post(Base):
    """Text or image submission inside a community.

    Net score is not stored here; it is aggregated from the votes table.
    """

    __tablename__ = "posts"
    __table_args__ = (
        CheckConstraint("content_type IN ('text', 'image')", name="ck_posts_content_type"),
        Index("ix_posts_community_id", "community_id"),
    )

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    community_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("communities.id", ondelete="CASCADE"),
        nullable=False,
    )
    author_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("users.id"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    # Rich-text editor JSON for text posts; NULL for image posts.
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_type: Mapped[str] = mapped_column(String(10), nullable=False, default=CONTENT_TYPE_TEXT)
    media_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    slug: Mapped[str | None] = mapped_column(String(100), nullable=True)

    is_removed: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )


class Comment(Base):
    """Reply attached to a post."""

    __tablename__ = "comments"
    __table_args__ = (Index("ix_comments_post_id", "post_id"),)

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    post_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    author_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("users.id"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_removed: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
