# src/eventmatch/schemas/swipe.py
"""Swipe-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from .profile import ProfileSummary


class SwipeRequest(BaseModel):
    """Schema for a like or pass on another participant."""

    user_id: int | None = Field(None, description="Identifier of the evaluated user")


class MatchCreated(BaseModel):
    """Match returned to the user whose like completed the pair."""

    id: int
    user: ProfileSummary
    event_id: int
    created_at: datetime


class LikeResponse(BaseModel):
    """Outcome of a like."""

    matched: bool
    match: MatchCreated | None = None


class PassResponse(BaseModel):
    """Acknowledgment of a pass."""

    status: str = "passed"
