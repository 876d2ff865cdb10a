"""Models capturing voting interactions on posts and comments."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tenxr_community.db.session import Base
from tenxr_community.db.time import utcnow

from .ids import ID_LENGTH, new_id


class VotableType(str, enum.Enum):
    """Kinds of entity that can receive votes."""

    POST = "post"
    COMMENT = "comment"


class VoteType(str, enum.Enum):
    """A user's stance on a votable item."""

    UPVOTE = "upvote"
    DOWNVOTE = "downvote"

    @property
    def weight(self) -> int:
        """Contribution of this stance to an item's net score."""
        return 1 if self is VoteType.UPVOTE else -1


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Vote(Base):
    """Per-user vote on a post or comment.

    ``votable_id`` is polymorphic over ``votable_type`` and therefore carries
    no foreign key; the ledger checks the target exists before writing.
    """

    __tablename__ = "votes"
    __table_args__ = (
        # At most one vote per user and item; concurrent inserts lose here.
        UniqueConstraint("user_id", "votable_id", "votable_type", name="uq_votes_user_votable"),
        Index("ix_votes_votable", "votable_type", "votable_id"),
    )

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)
    votable_id: Mapped[str] = mapped_column(String(ID_LENGTH), nullable=False)
    votable_type: Mapped[VotableType] = mapped_column(
        Enum(VotableType, name="votable_type", values_callable=_enum_values),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    vote_type: Mapped[VoteType] = mapped_column(
        Enum(VoteType, name="vote_type", values_callable=_enum_values),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
