# src/eventmatch/services/__init__.py
"""Business logic services for the event matching application."""

from .conversations import ConversationService
from .directory import ProfileDirectory
from .matching import MatchingService
from .membership import MembershipGate, get_event
from .notifier import RealtimeNotifier, get_notifier
from .participants import ParticipantService, RemovalAction
from .statistics import matching_statistics
from .visibility import (
    ConversationStatus,
    ConversationVisibility,
    VisibilityMediator,
    is_event_active,
    present_profile,
    redacted_profile,
)

__all__ = [
    "ConversationService",
    "ConversationStatus",
    "ConversationVisibility",
    "MatchingService",
    "MembershipGate",
    "ParticipantService",
    "ProfileDirectory",
    "RealtimeNotifier",
    "RemovalAction",
    "VisibilityMediator",
    "get_event",
    "get_notifier",
    "is_event_active",
    "matching_statistics",
    "present_profile",
    "redacted_profile",
]
