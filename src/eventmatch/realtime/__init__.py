"""Websocket connection tracking for realtime delivery."""

from .manager import Connection, ConnectionManager, manager, match_room, user_room

__all__ = ["Connection", "ConnectionManager", "manager", "match_room", "user_room"]
