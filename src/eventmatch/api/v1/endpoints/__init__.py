# src/eventmatch/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .conversations import router as conversations_router
from .matches import router as matches_router
from .realtime import router as realtime_router
from .swipes import router as swipes_router

__all__ = [
    "conversations_router",
    "matches_router",
    "realtime_router",
    "swipes_router",
]
