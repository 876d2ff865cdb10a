"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from tenxr_community.core.exceptions import Unauthenticated
from tenxr_community.core.security import decode_access_token
from tenxr_community.db.session import get_db
from tenxr_community.models import User
from tenxr_community.services.invalidation import InvalidationBus, get_invalidation_bus
from tenxr_community.services.user_service import get_user_by_auth_id
from tenxr_community.services.view_cache import ViewCache, get_view_cache

# Missing credentials are reported as Unauthenticated rather than FastAPI's 403.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Resolve the bearer token to the caller's local profile.

    Args:
        credentials: HTTP Bearer token credentials, if any were sent
        db: Database session

    Returns:
        User profile linked to the token's auth subject

    Raises:
        Unauthenticated: If no token is sent, it is invalid, or no profile matches
    """
    if credentials is None:
        raise Unauthenticated()

    auth_user_id = decode_access_token(credentials.credentials)
    user = get_user_by_auth_id(db, auth_user_id)
    if user is None:
        raise Unauthenticated("Failed to verify user account.")
    return user


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User | None:
    """Resolve the caller for endpoints that anonymous readers may also use.

    No token means an anonymous reader; a token that fails to resolve is
    still rejected.
    """
    if credentials is None:
        return None
    return get_current_user(credentials, db)


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]
InvalidationBusDep = Annotated[InvalidationBus, Depends(get_invalidation_bus)]
ViewCacheDep = Annotated[ViewCache, Depends(get_view_cache)]
