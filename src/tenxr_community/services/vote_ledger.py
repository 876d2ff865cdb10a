"""Vote ledger: one stance per user and votable item.

Casting a vote is a three-way branch on the user's existing vote for the
item:

* no vote yet: a vote row is inserted;
* same stance again: the row is deleted (toggle-off);
* opposite stance: the row's ``vote_type`` is switched in place.

The ``(user_id, votable_id, votable_type)`` unique constraint is what keeps
the at-most-one-row invariant under concurrent requests. The insert runs in
a savepoint; if another request inserted first, the ledger re-reads the row
that won and applies the branch to it instead.

Scores are not stored. They are aggregated from the votes table on read:
``+1`` per upvote and ``-1`` per downvote.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tenxr_community.core.exceptions import InvalidInput, NotFound, PersistenceError
from tenxr_community.core.settings import settings
from tenxr_community.models import Comment, Post, VotableType, Vote, VoteType
from tenxr_community.services import invalidation
from tenxr_community.services.invalidation import InvalidationBus, get_invalidation_bus
from tenxr_community.services.persistence import persistence_errors

logger = logging.getLogger(__name__)

__all__ = [
    "VoteAction",
    "VoteOutcome",
    "cast_vote",
    "find_vote",
    "my_vote",
    "parse_votable_type",
    "parse_vote_type",
    "score_for",
    "scores_for",
]


class VoteAction(str, enum.Enum):
    """Net effect of a single ``cast_vote`` call."""

    CREATED = "created"
    REMOVED = "removed"
    SWITCHED = "switched"


_ACTION_MESSAGES = {
    VoteAction.CREATED: "Vote registered!",
    VoteAction.REMOVED: "Vote removed!",
    VoteAction.SWITCHED: "Vote updated!",
}


@dataclass(frozen=True)
class VoteOutcome:
    """Result of casting a vote."""

    action: VoteAction
    votable_id: str
    votable_type: VotableType
    vote_type: VoteType | None
    score: int

    @property
    def message(self) -> str:
        return _ACTION_MESSAGES[self.action]


def parse_vote_type(raw: str | VoteType | None) -> VoteType:
    """Normalize a client-supplied vote type; matching is case-insensitive."""
    if isinstance(raw, VoteType):
        return raw
    if not raw or not raw.strip():
        raise InvalidInput("Invalid vote data.")
    try:
        return VoteType(raw.strip().lower())
    except ValueError as err:
        raise InvalidInput("Invalid vote type.") from err


def parse_votable_type(raw: str | VotableType | None) -> VotableType:
    """Normalize a client-supplied votable type, defaulting to posts."""
    if isinstance(raw, VotableType):
        return raw
    if raw is None or not raw.strip():
        return VotableType.POST
    try:
        return VotableType(raw.strip().lower())
    except ValueError as err:
        raise InvalidInput("Invalid votable type.") from err


def _ensure_votable_exists(db: Session, votable_id: str, votable_type: VotableType) -> None:
    if votable_type is VotableType.POST:
        exists = db.query(Post.id).filter(
            Post.id == votable_id,
            Post.is_removed.is_(False),
        ).first()
        label = "Post"
    else:
        exists = db.query(Comment.id).filter(
            Comment.id == votable_id,
            Comment.is_removed.is_(False),
        ).first()
        label = "Comment"
    if exists is None:
        raise NotFound(f"{label} not found.")


def find_vote(
    db: Session,
    user_id: str,
    votable_id: str,
    votable_type: VotableType = VotableType.POST,
) -> Vote | None:
    """Return the user's vote row for an item, if any."""
    return db.query(Vote).filter(
        Vote.user_id == user_id,
        Vote.votable_id == votable_id,
        Vote.votable_type == votable_type,
    ).first()


def _apply_vote(
    db: Session,
    *,
    user_id: str,
    votable_id: str,
    votable_type: VotableType,
    vote_type: VoteType,
) -> tuple[VoteAction, VoteType | None]:
    attempts = max(1, settings.vote_write_retries + 1)
    for _ in range(attempts):
        existing = find_vote(db, user_id, votable_id, votable_type)

        if existing is None:
            try:
                with db.begin_nested():
                    db.add(
                        Vote(
                            user_id=user_id,
                            votable_id=votable_id,
                            votable_type=votable_type,
                            vote_type=vote_type,
                        )
                    )
            except IntegrityError:
                logger.info(
                    "Concurrent vote insert for user=%s %s=%s; re-reading",
                    user_id,
                    votable_type.value,
                    votable_id,
                )
                continue
            return VoteAction.CREATED, vote_type

        if existing.vote_type == vote_type:
            db.delete(existing)
            db.flush()
            return VoteAction.REMOVED, None

        # created_at is left untouched on a switch.
        existing.vote_type = vote_type
        db.flush()
        return VoteAction.SWITCHED, vote_type

    logger.error(
        "Gave up casting vote for user=%s %s=%s after %d attempts",
        user_id,
        votable_type.value,
        votable_id,
        attempts,
    )
    raise PersistenceError("cast_vote")


def cast_vote(
    db: Session,
    *,
    user_id: str,
    votable_id: str,
    vote_type: str | VoteType,
    votable_type: str | VotableType | None = VotableType.POST,
    bus: InvalidationBus | None = None,
) -> VoteOutcome:
    """Create, retract or switch ``user_id``'s vote on an item.

    Args:
        db: Database session; the change is committed before returning.
        user_id: Local id of the authenticated voter.
        votable_id: Id of the post or comment being voted on.
        vote_type: ``"upvote"`` or ``"downvote"`` in any letter case.
        votable_type: ``"post"`` (default) or ``"comment"``.
        bus: Invalidation bus notified after the commit.

    Returns:
        The action taken, the stance now on record and the item's new score.

    Raises:
        InvalidInput: If the id or vote type is missing or malformed.
        NotFound: If the votable item does not exist.
        PersistenceError: If the store fails on any branch.
    """
    if not votable_id or not str(votable_id).strip():
        raise InvalidInput("Invalid vote data.")
    votable_id = str(votable_id).strip()
    parsed_type = parse_votable_type(votable_type)
    parsed_vote = parse_vote_type(vote_type)

    with persistence_errors(db, "cast_vote"):
        _ensure_votable_exists(db, votable_id, parsed_type)
        action, current = _apply_vote(
            db,
            user_id=user_id,
            votable_id=votable_id,
            votable_type=parsed_type,
            vote_type=parsed_vote,
        )
        db.commit()
        score = score_for(db, votable_id, parsed_type)

    scopes = [invalidation.HOME_FEED]
    if parsed_type is VotableType.POST:
        scopes.append(invalidation.post(votable_id))
    (bus or get_invalidation_bus()).publish(*scopes)

    return VoteOutcome(
        action=action,
        votable_id=votable_id,
        votable_type=parsed_type,
        vote_type=current,
        score=score,
    )


def _score_expression():  # type: ignore[no-untyped-def]
    return func.coalesce(
        func.sum(case((Vote.vote_type == VoteType.UPVOTE, 1), else_=-1)),
        0,
    )


def score_for(db: Session, votable_id: str, votable_type: VotableType = VotableType.POST) -> int:
    """Return upvotes minus downvotes for one item."""
    total = db.query(_score_expression()).filter(
        Vote.votable_id == votable_id,
        Vote.votable_type == votable_type,
    ).scalar()
    return int(total or 0)


def scores_for(
    db: Session,
    votable_ids: Iterable[str],
    votable_type: VotableType = VotableType.POST,
) -> dict[str, int]:
    """Return net scores for many items; items without votes score 0."""
    ids = list(votable_ids)
    if not ids:
        return {}
    rows = (
        db.query(Vote.votable_id, _score_expression())
        .filter(Vote.votable_id.in_(ids), Vote.votable_type == votable_type)
        .group_by(Vote.votable_id)
        .all()
    )
    scores = dict.fromkeys(ids, 0)
    for votable_id, total in rows:
        scores[votable_id] = int(total or 0)
    return scores


def my_vote(
    db: Session,
    user_id: str,
    votable_id: str,
    votable_type: VotableType = VotableType.POST,
) -> VoteType | None:
    """Return the user's current stance on an item, or None."""
    vote = find_vote(db, user_id, votable_id, votable_type)
    return vote.vote_type if vote else None
