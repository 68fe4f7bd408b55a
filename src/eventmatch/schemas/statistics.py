# src/eventmatch/schemas/statistics.py
"""Engagement statistics of an event."""

from pydantic import BaseModel, Field


class ParticipantStats(BaseModel):
    total: int
    active: int = Field(..., description="Participants who swiped or sent a message")
    engagement_rate: int = Field(..., description="Active participants, in percent")


class MatchingStats(BaseModel):
    total_matches: int
    average_matches_per_user: float
    reciprocity_rate: int = Field(..., description="Share of likes that ended in a match, in percent")


class SwipeStats(BaseModel):
    total: int
    likes: int
    passes: int
    users_who_swiped: int
    like_rate: int


class MessageStats(BaseModel):
    total: int
    users_who_sent: int
    conversations_active: int
    average_per_conversation: float


class EventStatistics(BaseModel):
    """Aggregates computed from the swipe, match and message tables."""

    event_id: int
    participants: ParticipantStats
    matching: MatchingStats
    swipes: SwipeStats
    messages: MessageStats
