"""Community-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict


class CommunityCreate(BaseModel):
    """Schema for creating a new community."""

    name: str


class CommunityDescriptionUpdate(BaseModel):
    """Schema for replacing a community description; empty clears it."""

    description: str | None = None


class CommunityResponse(BaseModel):
    """Schema for community information returned by the API."""

    id: str
    name: str
    slug: str
    description: str | None
    created_by: str

    model_config = ConfigDict(from_attributes=True)
