"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .chat import (
    DirectRoomCreate,
    DirectRoomResponse,
    MessageCreate,
    MessageResponse,
    MessageSent,
    RoomSummaryResponse,
    UnreadCount,
)
from .common import ActionResponse
from .community import CommunityCreate, CommunityDescriptionUpdate, CommunityResponse
from .post import (
    AuthorSummary,
    CommentCreate,
    CommentCreated,
    CommentDetail,
    CommunitySummary,
    FeedItem,
    FeedPageResponse,
    PostCreate,
    PostCreated,
    PostDetail,
)
from .user import UsernameUpdate, UserResponse
from .vote import VoteCreate, VoteResponse, VoteSummary

__all__ = [
    "ActionResponse",
    "DirectRoomCreate", "DirectRoomResponse",
    "MessageCreate", "MessageResponse", "MessageSent",
    "RoomSummaryResponse", "UnreadCount",
    "CommunityCreate", "CommunityDescriptionUpdate", "CommunityResponse",
    "AuthorSummary", "CommentCreate", "CommentCreated", "CommentDetail",
    "CommunitySummary", "FeedItem", "FeedPageResponse", "PostCreate", "PostCreated",
    "PostDetail",
    "UsernameUpdate", "UserResponse",
    "VoteCreate", "VoteResponse", "VoteSummary",
]
