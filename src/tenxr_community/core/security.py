"""Session token helpers standing in for the external auth service."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from tenxr_community.core.exceptions import Unauthenticated
from tenxr_community.core.settings import settings


def create_access_token(auth_user_id: str, expires_delta: timedelta | None = None) -> str:
    """Issue a signed token whose subject is the auth service's user id."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    expire = datetime.now(UTC) + expires_delta
    payload = {"sub": auth_user_id, "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str:
    """Return the stable auth user id carried by ``token``.

    Raises:
        Unauthenticated: If the token is malformed, expired or has no subject.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise Unauthenticated("Could not validate credentials.") from err

    subject = payload.get("sub")
    if not subject:
        raise Unauthenticated("Could not validate credentials.")
    return str(subject)
