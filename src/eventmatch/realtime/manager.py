# src/eventmatch/realtime/manager.py
"""In-process registry of websocket connections and the rooms they joined."""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


def user_room(user_id: int) -> str:
    return f"user:{user_id}"


def match_room(match_id: int) -> str:
    return f"match:{match_id}"


@dataclass
class Connection:
    """One accepted websocket and the rooms it belongs to."""

    websocket: WebSocket
    user_id: int
    connection_id: str
    rooms: set[str] = field(default_factory=set)


class ConnectionManager:
    """Tracks connections per user and fans frames out to rooms.

    Every connection joins its ``user:{id}`` room on connect; ``match:{id}``
    rooms are joined explicitly once membership was checked by the caller.
    """

    def __init__(self) -> None:
        self._connections: dict[str, Connection] = {}
        self._rooms: dict[str, set[str]] = {}
        self._lock = asyncio.Lock()
        self._counter = itertools.count(1)

    async def connect(self, websocket: WebSocket, user_id: int) -> Connection:
        """Accept ``websocket`` and register it under ``user_id``."""
        await websocket.accept()
        connection = Connection(
            websocket=websocket,
            user_id=user_id,
            connection_id=f"{user_id}-{next(self._counter)}",
        )
        async with self._lock:
            self._connections[connection.connection_id] = connection
        await self.join(connection, user_room(user_id))
        logger.info("WebSocket connected: user %s (%s)", user_id, connection.connection_id)
        return connection

    async def disconnect(self, connection: Connection) -> None:
        async with self._lock:
            self._connections.pop(connection.connection_id, None)
            for room in connection.rooms:
                members = self._rooms.get(room)
                if members is None:
                    continue
                members.discard(connection.connection_id)
                if not members:
                    del self._rooms[room]
            connection.rooms.clear()
        logger.info("WebSocket disconnected: user %s (%s)", connection.user_id, connection.connection_id)

    async def join(self, connection: Connection, room: str) -> None:
        async with self._lock:
            self._rooms.setdefault(room, set()).add(connection.connection_id)
            connection.rooms.add(room)

    async def leave(self, connection: Connection, room: str) -> None:
        async with self._lock:
            members = self._rooms.get(room)
            if members is not None:
                members.discard(connection.connection_id)
                if not members:
                    del self._rooms[room]
            connection.rooms.discard(room)

    def room_size(self, room: str) -> int:
        return len(self._rooms.get(room, ()))

    async def send_to_room(
        self,
        room: str,
        event: str,
        data: dict[str, Any],
        exclude: Connection | None = None,
    ) -> int:
        """Send ``{"event", "data"}`` to every connection in ``room``.

        Returns:
            Number of connections the frame was delivered to. A failing socket
            is logged and skipped; it never prevents delivery to the others.
        """
        async with self._lock:
            targets = [
                self._connections[connection_id]
                for connection_id in self._rooms.get(room, ())
                if connection_id in self._connections
            ]
        frame = {"event": event, "data": data}
        delivered = 0
        for connection in targets:
            if exclude is not None and connection.connection_id == exclude.connection_id:
                continue
            try:
                await connection.websocket.send_json(frame)
            except Exception as exc:
                logger.warning(
                    "Dropping %s for %s on %s: %s",
                    event,
                    connection.connection_id,
                    room,
                    exc,
                )
                continue
            delivered += 1
        return delivered

    async def send_personal(self, connection: Connection, event: str, data: dict[str, Any]) -> None:
        await connection.websocket.send_json({"event": event, "data": data})


manager = ConnectionManager()
