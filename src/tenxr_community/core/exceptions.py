"""Typed errors raised by the service layer.

Every failure a mutation can report to its caller is one of these classes.
The API layer converts them into structured ``{"status", "message"}``
responses in :mod:`tenxr_community.core.exception_handlers`.
"""


class CommunityError(Exception):
    """Base exception for all service-level failures."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class Unauthenticated(CommunityError):
    """Raised when no valid session accompanies a request."""

    def __init__(self, message: str = "Authentication required."):
        super().__init__(message)


class InvalidInput(CommunityError):
    """Raised for malformed or out-of-range input."""


class InvalidTarget(CommunityError):
    """Raised when a direct room is requested with an unusable counterpart."""


class NotAMember(CommunityError):
    """Raised when a user acts on a chat room they do not belong to."""

    def __init__(self, room_id: str):
        super().__init__("You are not a member of this chat room.")
        self.room_id = room_id


class NotFound(CommunityError):
    """Raised when a referenced entity does not exist."""


class Forbidden(CommunityError):
    """Raised when the caller exists but may not modify the entity."""


class Conflict(CommunityError):
    """Raised when a write would duplicate a unique name."""


class PersistenceError(CommunityError):
    """Raised for store-level failures; the cause is logged, never shown."""

    def __init__(self, operation: str, original_error: Exception | None = None):
        message = f"Persistence failure during {operation}"
        if original_error:
            message += f": {original_error}"
        super().__init__(
            message=message,
            details="Something went wrong. Please try again.",
        )
        self.operation = operation
        self.original_error = original_error
