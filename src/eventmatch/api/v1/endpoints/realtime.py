# src/eventmatch/api/v1/endpoints/realtime.py
"""Websocket endpoint carrying match rooms, typing indicators and read receipts."""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session, sessionmaker

from eventmatch.core.security import decode_user_id
from eventmatch.models import User
from eventmatch.realtime import Connection, ConnectionManager, match_room
from eventmatch.repositories import MatchRegistry

from ..dependencies import ConnectionManagerDep, SessionFactoryDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


def _match_id(data: Any) -> int | None:
    if not isinstance(data, dict):
        return None
    value = data.get("match_id")
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _is_participant(session_factory: sessionmaker[Session], match_id: int, user_id: int) -> bool:
    with session_factory() as db:
        return MatchRegistry(db).is_participant(match_id, user_id)


async def _relay(
    connections: ConnectionManager,
    session_factory: sessionmaker[Session],
    connection: Connection,
    match_id: int,
    event: str,
    data: dict[str, Any],
) -> None:
    """Forward a frame to the other members of a joined match room."""
    room = match_room(match_id)
    if room not in connection.rooms:
        return
    if not _is_participant(session_factory, match_id, connection.user_id):
        return
    await connections.send_to_room(room, event, data, exclude=connection)


async def handle_frame(
    connections: ConnectionManager,
    session_factory: sessionmaker[Session],
    connection: Connection,
    frame: dict[str, Any],
) -> None:
    """Dispatch one client frame ``{"event": ..., "data": {...}}``.

    Membership is checked in a session opened and closed for that check only.
    """
    event = frame.get("event")
    data = frame.get("data") or {}
    match_id = _match_id(data)
    user_id = connection.user_id

    if event == "chat:join":
        if match_id is None or not _is_participant(session_factory, match_id, user_id):
            logger.warning("User %s refused from match room %s", user_id, match_id)
            await connections.send_personal(
                connection, "chat:error", {"match_id": match_id, "message": "Conversation not found"}
            )
            return
        await connections.join(connection, match_room(match_id))
        await connections.send_personal(connection, "chat:joined", {"match_id": match_id})
    elif event == "chat:leave":
        if match_id is not None:
            await connections.leave(connection, match_room(match_id))
    elif event == "chat:typing":
        if match_id is not None:
            await _relay(
                connections,
                session_factory,
                connection,
                match_id,
                "chat:typing",
                {"match_id": match_id, "user_id": user_id, "is_typing": bool(data.get("is_typing", True))},
            )
    elif event == "chat:markRead":
        if match_id is not None:
            await _relay(
                connections,
                session_factory,
                connection,
                match_id,
                "chat:messageRead",
                {"match_id": match_id, "message_id": data.get("message_id"), "read_by": user_id},
            )
    else:
        await connections.send_personal(
            connection, "chat:error", {"message": f"Unknown event: {event}"}
        )


def _authenticate(session_factory: sessionmaker[Session], token: str | None) -> int | None:
    if not token:
        return None
    user_id = decode_user_id(token)
    if user_id is None:
        return None
    with session_factory() as db:
        if db.get(User, user_id) is None:
            return None
    return user_id


@router.websocket("/ws")
async def realtime_socket(
    websocket: WebSocket,
    session_factory: SessionFactoryDep,
    connections: ConnectionManagerDep,
    token: str | None = Query(None),
) -> None:
    """Authenticate with ``?token=`` and exchange JSON frames until the client leaves."""
    user_id = _authenticate(session_factory, token)
    if user_id is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    connection = await connections.connect(websocket, user_id)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
            except ValueError:
                frame = None
            if not isinstance(frame, dict):
                await connections.send_personal(connection, "chat:error", {"message": "Invalid frame"})
                continue
            await handle_frame(connections, session_factory, connection, frame)
    except WebSocketDisconnect:
        pass
    finally:
        await connections.disconnect(connection)
