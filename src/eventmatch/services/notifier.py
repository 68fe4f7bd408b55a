# src/eventmatch/services/notifier.py
"""Realtime emissions of match and conversation events.

Emissions happen after the database commit, so a client never hears about a
match or message that was rolled back.
"""

from __future__ import annotations

import logging
from typing import Any

from eventmatch.realtime import ConnectionManager, manager, match_room, user_room
from eventmatch.schemas import MessageResponse

logger = logging.getLogger(__name__)

MATCH_CREATED = "match:created"
MESSAGE_CREATED = "message:created"
CONVERSATION_UPDATED = "conversation:updated"


class RealtimeNotifier:
    """Pushes engine events to the rooms of a :class:`ConnectionManager`."""

    def __init__(self, connections: ConnectionManager) -> None:
        self.connections = connections

    async def emit(self, room: str, event: str, data: dict[str, Any]) -> None:
        delivered = await self.connections.send_to_room(room, event, data)
        logger.debug("Emitted %s to %s (%d connection(s))", event, room, delivered)

    async def match_created(self, user_a: int, user_b: int, payload: dict[str, Any]) -> None:
        """Tell both participants about a new match."""
        await self.emit(user_room(user_a), MATCH_CREATED, payload)
        await self.emit(user_room(user_b), MATCH_CREATED, payload)

    async def message_created(self, match_id: int, message: MessageResponse, sender_id: int) -> None:
        await self.emit(
            match_room(match_id),
            MESSAGE_CREATED,
            {
                "match_id": match_id,
                "message": message.model_dump(mode="json"),
                "sender_id": sender_id,
            },
        )

    async def conversation_updated(self, user_id: int, payload: dict[str, Any]) -> None:
        """Refresh the conversation list of ``user_id`` only."""
        await self.emit(user_room(user_id), CONVERSATION_UPDATED, payload)


_notifier = RealtimeNotifier(manager)


def get_notifier() -> RealtimeNotifier:
    """Return the process-wide notifier bound to the shared connection manager."""
    return _notifier
