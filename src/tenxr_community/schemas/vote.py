"""Vote-related Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, Field

from .common import ActionResponse


class VoteCreate(BaseModel):
    """Schema for casting a vote.

    ``vote_type`` is validated by the ledger so that any letter case is
    accepted and bad values are reported as a structured error.
    """

    votable_id: str = Field(..., description="Id of the post or comment")
    votable_type: str = Field("post", description="'post' or 'comment'")
    vote_type: str = Field(..., description="'upvote' or 'downvote'")


class VoteResponse(ActionResponse):
    """Outcome of a cast vote with the item's new score."""

    action: Literal["created", "removed", "switched"]
    vote_type: Literal["upvote", "downvote"] | None
    score: int


class VoteSummary(BaseModel):
    """Aggregated score and the caller's own stance on an item."""

    votable_id: str
    votable_type: str
    score: int
    my_vote: Literal["upvote", "downvote"] | None
