# src/eventmatch/models/__init__.py
"""SQLAlchemy models for the event matching service."""

from .event import Event, EventBlockedUser, EventRegistration
from .match import Match, Message
from .swipe import Swipe
from .user import Photo, User

__all__ = [
    "Event", "EventBlockedUser", "EventRegistration",
    "Match", "Message",
    "Swipe",
    "Photo", "User",
]
