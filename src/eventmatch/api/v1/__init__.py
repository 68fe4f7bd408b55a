# src/eventmatch/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    conversations_router,
    matches_router,
    realtime_router,
    swipes_router,
)

__all__ = [
    "conversations_router",
    "matches_router",
    "realtime_router",
    "swipes_router",
]
