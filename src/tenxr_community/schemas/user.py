"""User-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict


class UsernameUpdate(BaseModel):
    """Schema for changing the caller's username."""

    username: str


class UserResponse(BaseModel):
    """Schema for user information returned by the API."""

    id: str
    username: str | None
    avatar_url: str | None

    model_config = ConfigDict(from_attributes=True)
