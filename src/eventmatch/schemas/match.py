# src/eventmatch/schemas/match.py
"""Match listing schemas."""

from datetime import datetime

from pydantic import BaseModel

from .profile import ProfileSummary


class MatchListItem(BaseModel):
    """One match as listed for a participant."""

    match_id: int
    user: ProfileSummary
    created_at: datetime


class EventRef(BaseModel):
    """Minimal event reference used to group matches."""

    id: int
    name: str


class EventMatches(BaseModel):
    """Matches of a user inside one event."""

    event: EventRef
    matches: list[MatchListItem]


class AllMatchesResponse(BaseModel):
    """Cross-event match listing."""

    total: int
    by_event: list[EventMatches]
