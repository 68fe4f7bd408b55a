"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .conversation import (
    ConversationEvent,
    ConversationHeader,
    ConversationSummary,
    ConversationThread,
    EventConversations,
    LastMessage,
)
from .match import AllMatchesResponse, EventMatches, EventRef, MatchListItem
from .message import LikeToggle, MessageCreate, MessageResponse, ReadReceipt
from .profile import CandidateProfile, PhotoOut, ProfileSummary
from .statistics import (
    EventStatistics,
    MatchingStats,
    MessageStats,
    ParticipantStats,
    SwipeStats,
)
from .swipe import LikeResponse, MatchCreated, PassResponse, SwipeRequest

__all__ = [
    "ConversationEvent", "ConversationHeader", "ConversationSummary",
    "ConversationThread", "EventConversations", "LastMessage",
    "AllMatchesResponse", "EventMatches", "EventRef", "MatchListItem",
    "LikeToggle", "MessageCreate", "MessageResponse", "ReadReceipt",
    "CandidateProfile", "PhotoOut", "ProfileSummary",
    "EventStatistics", "MatchingStats", "MessageStats", "ParticipantStats", "SwipeStats",
    "LikeResponse", "MatchCreated", "PassResponse", "SwipeRequest",
]
