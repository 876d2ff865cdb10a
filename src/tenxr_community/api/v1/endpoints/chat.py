"""Direct message endpoints for the 10xR API."""

from __future__ import annotations

from fastapi import APIRouter, status

from tenxr_community.schemas.chat import (
    DirectRoomCreate,
    DirectRoomResponse,
    MessageCreate,
    MessageResponse,
    MessageSent,
    RoomSummaryResponse,
    UnreadCount,
)
from tenxr_community.schemas.common import ActionResponse
from tenxr_community.services import chat

from ..dependencies import CurrentUserDep, InvalidationBusDep, SessionDep

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/rooms", response_model=DirectRoomResponse)
async def open_direct_room(
    room_data: DirectRoomCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    bus: InvalidationBusDep,
) -> DirectRoomResponse:
    """Return the caller's direct room with the target user, creating it if needed."""
    room = chat.get_or_create_direct_room(
        db,
        requester_id=current_user.id,
        target_id=room_data.target_user_id,
        bus=bus,
    )
    return DirectRoomResponse(room_id=room.room_id, created=room.created)


@router.get("/rooms", response_model=list[RoomSummaryResponse])
async def list_rooms(current_user: CurrentUserDep, db: SessionDep) -> list[RoomSummaryResponse]:
    """List the caller's conversations, most recently active first."""
    summaries = chat.list_rooms(db, user_id=current_user.id)
    return [RoomSummaryResponse.model_validate(summary) for summary in summaries]


@router.get("/rooms/{room_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    room_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
    bus: InvalidationBusDep,
) -> list:
    """Return the room's messages oldest first and mark the room read."""
    return chat.list_messages(db, user_id=current_user.id, room_id=room_id, bus=bus)


@router.post(
    "/rooms/{room_id}/messages",
    response_model=MessageSent,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    room_id: str,
    message_data: MessageCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    bus: InvalidationBusDep,
) -> MessageSent:
    """Send a message to a room the caller belongs to."""
    message = chat.send_message(
        db,
        user_id=current_user.id,
        room_id=room_id,
        text=message_data.text,
        bus=bus,
    )
    return MessageSent(status="success", message="Message sent!", message_id=message.id)


@router.post("/rooms/{room_id}/read", response_model=ActionResponse)
async def mark_room_read(
    room_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
    bus: InvalidationBusDep,
) -> ActionResponse:
    """Record that the caller has read the room up to now."""
    chat.mark_room_read(db, user_id=current_user.id, room_id=room_id, bus=bus)
    return ActionResponse(status="success", message="Conversation marked as read.")


@router.get("/rooms/{room_id}/unread", response_model=UnreadCount)
async def get_unread_count(room_id: str, current_user: CurrentUserDep, db: SessionDep) -> UnreadCount:
    """Count messages from other members the caller has not read."""
    count = chat.unread_count(db, user_id=current_user.id, room_id=room_id)
    return UnreadCount(room_id=room_id, unread_count=count)


@router.delete("/messages/{message_id}", response_model=ActionResponse)
async def delete_message(
    message_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
    bus: InvalidationBusDep,
) -> ActionResponse:
    """Soft-delete one of the caller's messages."""
    chat.delete_message(db, user_id=current_user.id, message_id=message_id, bus=bus)
    return ActionResponse(status="success", message="Message deleted.")
