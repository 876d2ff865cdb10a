"""User profile endpoints for the 10xR API."""

from fastapi import APIRouter, Query

from tenxr_community.models import User
from tenxr_community.schemas.common import ActionResponse
from tenxr_community.schemas.user import UsernameUpdate, UserResponse
from tenxr_community.services import user_service

from ..dependencies import CurrentUserDep, InvalidationBusDep, SessionDep

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: CurrentUserDep) -> User:
    """Return the caller's profile."""
    return current_user


@router.put("/me/username", response_model=ActionResponse)
async def update_username(
    update: UsernameUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
    bus: InvalidationBusDep,
) -> ActionResponse:
    """Change the caller's username."""
    change = user_service.update_username(db, current_user, update.username, bus=bus)
    if not change.changed:
        return ActionResponse(
            status="info",
            message="No changes detected. Username is already set to this value.",
        )
    return ActionResponse(status="success", message="Username updated successfully!")


@router.get("/search", response_model=list[UserResponse])
async def search_users(
    current_user: CurrentUserDep,
    db: SessionDep,
    q: str = Query("", description="Part of a username, matched case-insensitively"),
) -> list[User]:
    """Find other users to start a direct conversation with."""
    return user_service.search_users(db, q, exclude_user_id=current_user.id)
