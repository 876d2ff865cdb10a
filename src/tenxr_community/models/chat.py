"""Models describing chat rooms, their members and messages."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from tenxr_community.db.session import Base
from tenxr_community.db.time import utcnow

from .ids import ID_LENGTH, new_id

MESSAGE_MAX_LENGTH = 10_000


def direct_room_key(user1_id: str, user2_id: str) -> str:
    """Return the order-independent key identifying a pair's direct room."""
    low, high = sorted((user1_id, user2_id))
    return f"{low}:{high}"


class ChatRoom(Base):
    """Messaging context shared by its members."""

    __tablename__ = "chat_room"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_direct: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # Unordered member pair of a direct room; unique so a pair owns one room.
    direct_key: Mapped[str | None] = mapped_column(
        String(2 * ID_LENGTH + 1),
        unique=True,
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class ChatRoomMember(Base):
    """Join table mapping users into chat rooms."""

    __tablename__ = "chat_room_member"
    __table_args__ = (Index("ix_chat_room_member_member_id", "member_id"),)

    chat_room_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("chat_room.id", ondelete="CASCADE"),
        primary_key=True,
    )
    member_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # NULL until the member first opens the room.
    last_read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class Message(Base):
    """A single chat message; removal only sets ``is_deleted``."""

    __tablename__ = "message"
    __table_args__ = (
        CheckConstraint(
            f"length(text) BETWEEN 1 AND {MESSAGE_MAX_LENGTH}",
            name="ck_message_text_length",
        ),
        Index("ix_message_room_created", "chat_room_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    chat_room_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("chat_room.id", ondelete="CASCADE"),
        nullable=False,
    )
    author_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("users.id"),
        nullable=False,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    is_edited: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
