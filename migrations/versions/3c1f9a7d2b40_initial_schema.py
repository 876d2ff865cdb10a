"""initial schema

Revision ID: 3c1f9a7d2b40
Revises:
Create Date: 2026-10-19 09:12:44.518203

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1f9a7d2b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ID = sa.String(length=36)


def upgrade() -> None:
    """Create users, communities, posts, votes and chat tables."""
    op.create_table(
        "users",
        sa.Column("id", ID, nullable=False),
        sa.Column("auth_user_id", sa.Text(), nullable=False),
        sa.Column("username", sa.String(length=20), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("auth_user_id"),
        sa.UniqueConstraint("username"),
    )
    op.create_table(
        "communities",
        sa.Column("id", ID, nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("slug", sa.String(length=50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_by", ID, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sa.UniqueConstraint("slug"),
    )
    op.create_table(
        "posts",
        sa.Column("id", ID, nullable=False),
        sa.Column("community_id", ID, nullable=False),
        sa.Column("author_id", ID, nullable=False),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("content_type", sa.String(length=10), nullable=False),
        sa.Column("media_url", sa.Text(), nullable=True),
        sa.Column("slug", sa.String(length=100), nullable=True),
        sa.Column("is_removed", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("content_type IN ('text', 'image')", name="ck_posts_content_type"),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["community_id"], ["communities.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_posts_community_id", "posts", ["community_id"])
    op.create_table(
        "comments",
        sa.Column("id", ID, nullable=False),
        sa.Column("post_id", ID, nullable=False),
        sa.Column("author_id", ID, nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_removed", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["post_id"], ["posts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comments_post_id", "comments", ["post_id"])
    op.create_table(
        "votes",
        sa.Column("id", ID, nullable=False),
        sa.Column("votable_id", ID, nullable=False),
        sa.Column(
            "votable_type",
            sa.Enum("post", "comment", name="votable_type"),
            nullable=False,
        ),
        sa.Column("user_id", ID, nullable=False),
        sa.Column(
            "vote_type",
            sa.Enum("upvote", "downvote", name="vote_type"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "votable_id", "votable_type", name="uq_votes_user_votable"),
    )
    op.create_index("ix_votes_votable", "votes", ["votable_type", "votable_id"])
    op.create_table(
        "chat_room",
        sa.Column("id", ID, nullable=False),
        sa.Column("name", sa.Text(), nullable=True),
        sa.Column("is_direct", sa.Boolean(), nullable=False),
        sa.Column("direct_key", sa.String(length=73), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("direct_key"),
    )
    op.create_table(
        "chat_room_member",
        sa.Column("chat_room_id", ID, nullable=False),
        sa.Column("member_id", ID, nullable=False),
        sa.Column("last_read_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["chat_room_id"], ["chat_room.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["member_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("chat_room_id", "member_id"),
    )
    op.create_index("ix_chat_room_member_member_id", "chat_room_member", ["member_id"])
    op.create_table(
        "message",
        sa.Column("id", ID, nullable=False),
        sa.Column("chat_room_id", ID, nullable=False),
        sa.Column("author_id", ID, nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_edited", sa.Boolean(), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), nullable=False),
        sa.CheckConstraint("length(text) BETWEEN 1 AND 10000", name="ck_message_text_length"),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["chat_room_id"], ["chat_room.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_message_room_created", "message", ["chat_room_id", "created_at"])


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_index("ix_message_room_created", table_name="message")
    op.drop_table("message")
    op.drop_index("ix_chat_room_member_member_id", table_name="chat_room_member")
    op.drop_table("chat_room_member")
    op.drop_table("chat_room")
    op.drop_index("ix_votes_votable", table_name="votes")
    op.drop_table("votes")
    op.drop_index("ix_comments_post_id", table_name="comments")
    op.drop_table("comments")
    op.drop_index("ix_posts_community_id", table_name="posts")
    op.drop_table("posts")
    op.drop_table("communities")
    op.drop_table("users")
    sa.Enum(name="vote_type").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="votable_type").drop(op.get_bind(), checkfirst=True)
