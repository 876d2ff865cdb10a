"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class ActionResponse(BaseModel):
    """Structured result returned by every mutating endpoint."""

    status: Literal["success", "error", "info"]
    message: str = Field(..., description="Human-readable outcome for inline display.")
