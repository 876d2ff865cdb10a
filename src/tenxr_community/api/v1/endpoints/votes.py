"""Vote-related endpoints for the 10xR API."""

from fastapi import APIRouter

from tenxr_community.schemas.vote import VoteCreate, VoteResponse, VoteSummary
from tenxr_community.services import vote_ledger

from ..dependencies import CurrentUserDep, InvalidationBusDep, SessionDep

router = APIRouter(prefix="/votes", tags=["votes"])


@router.post("/", response_model=VoteResponse)
async def cast_vote(
    vote_data: VoteCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    bus: InvalidationBusDep,
) -> VoteResponse:
    """Cast, retract or switch the caller's vote on a post or comment."""
    outcome = vote_ledger.cast_vote(
        db,
        user_id=current_user.id,
        votable_id=vote_data.votable_id,
        votable_type=vote_data.votable_type,
        vote_type=vote_data.vote_type,
        bus=bus,
    )
    return VoteResponse(
        status="success",
        message=outcome.message,
        action=outcome.action.value,
        vote_type=outcome.vote_type.value if outcome.vote_type else None,
        score=outcome.score,
    )


@router.get("/{votable_type}/{votable_id}", response_model=VoteSummary)
async def get_vote_summary(
    votable_type: str,
    votable_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> VoteSummary:
    """Return an item's net score and the caller's current stance."""
    parsed_type = vote_ledger.parse_votable_type(votable_type)
    stance = vote_ledger.my_vote(db, current_user.id, votable_id, parsed_type)
    return VoteSummary(
        votable_id=votable_id,
        votable_type=parsed_type.value,
        score=vote_ledger.score_for(db, votable_id, parsed_type),
        my_vote=stance.value if stance else None,
    )
