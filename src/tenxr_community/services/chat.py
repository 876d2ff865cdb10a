"""Direct-message rooms and the messages exchanged in them.

A pair of users owns at most one direct room. Resolution first scans the
requester's direct-room memberships for one the target also belongs to; only
when none exists is :func:`get_or_create_chat_room` called. That function is
the atomic step: it inserts the room and both memberships in one savepoint,
guarded by the unique ``chat_room.direct_key`` of the unordered pair, and
returns the existing room if a concurrent request created it first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tenxr_community.core.exceptions import (
    Forbidden,
    InvalidInput,
    InvalidTarget,
    NotAMember,
    NotFound,
)
from tenxr_community.core.settings import settings
from tenxr_community.db.time import utcnow
from tenxr_community.models import ChatRoom, ChatRoomMember, Message, User
from tenxr_community.models.chat import direct_room_key
from tenxr_community.services import invalidation
from tenxr_community.services.invalidation import InvalidationBus, get_invalidation_bus
from tenxr_community.services.persistence import persistence_errors

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectRoom:
    """Identifier of a resolved direct room and whether this call made it."""

    room_id: str
    created: bool


@dataclass(frozen=True)
class RoomSummary:
    """One entry of a user's conversation list."""

    room_id: str
    is_direct: bool
    updated_at: datetime
    last_read_at: datetime | None
    other_member_id: str | None
    other_username: str | None
    last_message: Message | None
    unread_count: int


def find_direct_room(db: Session, key: str) -> ChatRoom | None:
    """Return the direct room registered under a pair key, if any."""
    return db.query(ChatRoom).filter(ChatRoom.direct_key == key).first()


def get_or_create_chat_room(db: Session, user1_id: str, user2_id: str) -> tuple[ChatRoom, bool]:
    """Return the direct room for a pair, creating it atomically if absent.

    The room row and both member rows are written in a single savepoint. A
    unique violation on ``direct_key`` means another request created the room
    in the meantime; that room is returned instead.

    Returns:
        The room and True if this call created it.
    """
    key = direct_room_key(user1_id, user2_id)
    room = find_direct_room(db, key)
    if room is not None:
        return room, False

    try:
        with db.begin_nested():
            room = ChatRoom(is_direct=True, direct_key=key)
            db.add(room)
            db.flush()
            db.add_all(
                [
                    ChatRoomMember(chat_room_id=room.id, member_id=user1_id),
                    ChatRoomMember(chat_room_id=room.id, member_id=user2_id),
                ]
            )
    except IntegrityError:
        logger.info("Direct room for %s was created concurrently; reusing it", key)
        return db.query(ChatRoom).filter(ChatRoom.direct_key == key).one(), False
    return room, True


def _find_shared_direct_room(db: Session, requester_id: str, target_id: str) -> str | None:
    memberships = (
        db.query(ChatRoomMember.chat_room_id)
        .join(ChatRoom, ChatRoom.id == ChatRoomMember.chat_room_id)
        .filter(ChatRoomMember.member_id == requester_id, ChatRoom.is_direct.is_(True))
        .all()
    )
    for (room_id,) in memberships:
        other = db.query(ChatRoomMember).filter(
            ChatRoomMember.chat_room_id == room_id,
            ChatRoomMember.member_id == target_id,
        ).first()
        if other is not None:
            return room_id
    return None


def get_or_create_direct_room(
    db: Session,
    *,
    requester_id: str,
    target_id: str | None,
    bus: InvalidationBus | None = None,
) -> DirectRoom:
    """Resolve the single direct room shared by ``requester_id`` and ``target_id``.

    Raises:
        InvalidTarget: If the target is missing, is the requester, or does not exist.
        PersistenceError: If the scan or the creation fails in the store.
    """
    if not target_id or target_id == requester_id:
        raise InvalidTarget("Invalid target user.")

    with persistence_errors(db, "get_or_create_direct_room"):
        if db.get(User, target_id) is None:
            raise InvalidTarget("Target user not found.")

        room_id = _find_shared_direct_room(db, requester_id, target_id)
        created = False
        if room_id is None:
            room, created = get_or_create_chat_room(db, requester_id, target_id)
            room_id = room.id
            db.commit()

    scopes = [invalidation.conversations(requester_id)]
    if created:
        scopes.append(invalidation.conversations(target_id))
        logger.info("Created direct room %s", room_id)
    (bus or get_invalidation_bus()).publish(*scopes)
    return DirectRoom(room_id=room_id, created=created)


def require_membership(db: Session, room_id: str, user_id: str) -> ChatRoomMember:
    """Return the user's membership row, re-checked against the store.

    Raises:
        NotAMember: If the user does not belong to the room.
    """
    membership = db.query(ChatRoomMember).filter(
        ChatRoomMember.chat_room_id == room_id,
        ChatRoomMember.member_id == user_id,
    ).first()
    if membership is None:
        raise NotAMember(room_id)
    return membership


def _member_ids(db: Session, room_id: str) -> list[str]:
    rows = db.query(ChatRoomMember.member_id).filter(ChatRoomMember.chat_room_id == room_id).all()
    return [member_id for (member_id,) in rows]


def _conversation_scopes(db: Session, room_id: str) -> list[str]:
    return [invalidation.chat_room(room_id)] + [
        invalidation.conversations(member_id) for member_id in _member_ids(db, room_id)
    ]


def send_message(
    db: Session,
    *,
    user_id: str,
    room_id: str | None,
    text: str | None,
    bus: InvalidationBus | None = None,
) -> Message:
    """Append a message authored by ``user_id`` to a room.

    Membership is checked before the text, so a non-member is refused with
    :class:`NotAMember` whatever they tried to send.

    Raises:
        InvalidInput: If the room id is missing or the trimmed text is empty
            or longer than the configured maximum.
        NotAMember: If the sender does not belong to the room.
        PersistenceError: If the insert fails.
    """
    if not room_id:
        raise InvalidInput("Room ID is required.")

    with persistence_errors(db, "send_message"):
        require_membership(db, room_id, user_id)

        cleaned = (text or "").strip()
        if not cleaned:
            raise InvalidInput("Message text is required.")
        limit = settings.message_max_length
        if len(cleaned) > limit:
            raise InvalidInput(f"Message is too long (max {limit:,} characters).")

        message = Message(chat_room_id=room_id, author_id=user_id, text=cleaned)
        db.add(message)
        room = db.get(ChatRoom, room_id)
        if room is not None:
            room.updated_at = utcnow()
        db.commit()
        db.refresh(message)
        scopes = _conversation_scopes(db, room_id)

    (bus or get_invalidation_bus()).publish(*scopes)
    return message


def delete_message(
    db: Session,
    *,
    user_id: str,
    message_id: str,
    bus: InvalidationBus | None = None,
) -> Message:
    """Soft-delete a message written by ``user_id``."""
    with persistence_errors(db, "delete_message"):
        message = db.query(Message).filter(
            Message.id == message_id,
            Message.is_deleted.is_(False),
        ).first()
        if message is None:
            raise NotFound("Message not found.")
        if message.author_id != user_id:
            raise Forbidden("You can only delete your own messages.")

        message.is_deleted = True
        db.commit()
        scopes = _conversation_scopes(db, message.chat_room_id)

    (bus or get_invalidation_bus()).publish(*scopes)
    return message


def mark_room_read(
    db: Session,
    *,
    user_id: str,
    room_id: str,
    bus: InvalidationBus | None = None,
) -> ChatRoomMember:
    """Record that ``user_id`` has seen everything in the room up to now."""
    with persistence_errors(db, "mark_room_read"):
        membership = require_membership(db, room_id, user_id)
        membership.last_read_at = utcnow()
        db.commit()

    (bus or get_invalidation_bus()).publish(invalidation.conversations(user_id))
    return membership


def _unread_query(db: Session, membership: ChatRoomMember):  # type: ignore[no-untyped-def]
    query = db.query(func.count(Message.id)).filter(
        Message.chat_room_id == membership.chat_room_id,
        Message.author_id != membership.member_id,
        Message.is_deleted.is_(False),
    )
    if membership.last_read_at is not None:
        query = query.filter(Message.created_at > membership.last_read_at)
    return query


def unread_count(db: Session, *, user_id: str, room_id: str) -> int:
    """Count other members' messages the user has not read yet."""
    with persistence_errors(db, "unread_count"):
        membership = require_membership(db, room_id, user_id)
        return int(_unread_query(db, membership).scalar() or 0)


def list_messages(
    db: Session,
    *,
    user_id: str,
    room_id: str,
    mark_read: bool = True,
    bus: InvalidationBus | None = None,
) -> list[Message]:
    """Return the room's visible messages oldest first.

    Messages sharing a timestamp have no defined relative order.
    """
    with persistence_errors(db, "list_messages"):
        require_membership(db, room_id, user_id)
        messages = (
            db.query(Message)
            .filter(Message.chat_room_id == room_id, Message.is_deleted.is_(False))
            .order_by(Message.created_at.asc())
            .all()
        )

    if mark_read:
        mark_room_read(db, user_id=user_id, room_id=room_id, bus=bus)
    return messages


def list_rooms(db: Session, *, user_id: str) -> list[RoomSummary]:
    """Return the user's conversations, most recently active first."""
    with persistence_errors(db, "list_rooms"):
        rows = (
            db.query(ChatRoomMember, ChatRoom)
            .join(ChatRoom, ChatRoom.id == ChatRoomMember.chat_room_id)
            .filter(ChatRoomMember.member_id == user_id)
            .order_by(ChatRoom.updated_at.desc())
            .all()
        )

        summaries: list[RoomSummary] = []
        for membership, room in rows:
            other = (
                db.query(User)
                .join(ChatRoomMember, ChatRoomMember.member_id == User.id)
                .filter(ChatRoomMember.chat_room_id == room.id, User.id != user_id)
                .first()
            )
            last_message = (
                db.query(Message)
                .filter(Message.chat_room_id == room.id, Message.is_deleted.is_(False))
                .order_by(Message.created_at.desc())
                .first()
            )
            summaries.append(
                RoomSummary(
                    room_id=room.id,
                    is_direct=room.is_direct,
                    updated_at=room.updated_at,
                    last_read_at=membership.last_read_at,
                    other_member_id=other.id if other else None,
                    other_username=other.username if other else None,
                    last_message=last_message,
                    unread_count=int(_unread_query(db, membership).scalar() or 0),
                )
            )
    return summaries
