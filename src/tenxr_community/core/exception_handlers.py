"""Exception handlers converting service errors into structured responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from tenxr_community.core.exceptions import (
    CommunityError,
    Conflict,
    Forbidden,
    InvalidInput,
    InvalidTarget,
    NotAMember,
    NotFound,
    PersistenceError,
    Unauthenticated,
)

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Something went wrong. Please try again."

_STATUS_BY_ERROR: list[tuple[type[CommunityError], int]] = [
    (Unauthenticated, status.HTTP_401_UNAUTHORIZED),
    (InvalidInput, status.HTTP_400_BAD_REQUEST),
    (InvalidTarget, status.HTTP_400_BAD_REQUEST),
    (NotAMember, status.HTTP_403_FORBIDDEN),
    (Forbidden, status.HTTP_403_FORBIDDEN),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (Conflict, status.HTTP_409_CONFLICT),
]


def status_code_for(exc: CommunityError) -> int:
    """Return the HTTP status code used to report ``exc``."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def community_exception_handler(request: Request, exc: CommunityError) -> JSONResponse:
    """Render a service error as ``{"status": "error", "message": ...}``.

    Persistence failures are reported with a generic message; their cause was
    already logged where it happened.
    """
    status_code = status_code_for(exc)
    if isinstance(exc, PersistenceError) or status_code >= 500:
        message = GENERIC_FAILURE_MESSAGE
    else:
        message = exc.message

    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    else:
        headers = None

    logger.debug("%s %s -> %s (%s)", request.method, request.url.path, status_code, type(exc).__name__)
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message, "type": type(exc).__name__},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register the service error handler with the FastAPI app."""
    app.add_exception_handler(CommunityError, community_exception_handler)  # type: ignore[arg-type]
