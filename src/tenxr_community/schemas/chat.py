"""Chat room and message Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .common import ActionResponse


class DirectRoomCreate(BaseModel):
    """Request to open (or reopen) a direct conversation."""

    target_user_id: str = Field(..., description="Local id of the other participant")


class DirectRoomResponse(BaseModel):
    """Identifier of the pair's direct room."""

    room_id: str
    created: bool


class MessageCreate(BaseModel):
    """Schema for sending a chat message."""

    text: str = Field(..., description="Message body; trimmed before validation")


class MessageResponse(BaseModel):
    """Schema for a chat message returned by the API."""

    id: str
    chat_room_id: str
    author_id: str
    text: str
    created_at: datetime
    is_edited: bool

    model_config = ConfigDict(from_attributes=True)


class MessageSent(ActionResponse):
    """Confirmation of a sent message."""

    message_id: str


class UnreadCount(BaseModel):
    room_id: str
    unread_count: int


class RoomSummaryResponse(BaseModel):
    """Entry of the caller's conversation list."""

    room_id: str
    is_direct: bool
    updated_at: datetime
    last_read_at: datetime | None
    other_member_id: str | None
    other_username: str | None
    last_message: MessageResponse | None
    unread_count: int

    model_config = ConfigDict(from_attributes=True)
