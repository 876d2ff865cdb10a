"""SQLAlchemy models for the 10xR community platform."""

from .chat import ChatRoom, ChatRoomMember, Message
from .community import Community
from .post import Comment, Post
from .user import User
from .vote import VotableType, Vote, VoteType

__all__ = [
    "ChatRoom", "ChatRoomMember", "Message",
    "Community",
    "Comment", "Post",
    "User",
    "VotableType", "Vote", "VoteType",
]
