# src/eventmatch/models/event.py
"""Event, registration and block rows consulted by the membership gate."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from eventmatch.db.session import Base
from eventmatch.db.time import utcnow


class Event(Base):
    """Time-boxed event inside which users swipe and chat."""

    __tablename__ = "event"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Application window; a NULL end keeps the event open indefinitely.
    app_start_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    app_end_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class EventRegistration(Base):
    """A user's participation in an event together with their event profile."""

    __tablename__ = "event_registration"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    event_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("event.id", ondelete="CASCADE"),
        primary_key=True,
    )
    profile_info: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class EventBlockedUser(Base):
    """Organiser-imposed block of a user inside one event."""

    __tablename__ = "event_blocked_user"

    event_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("event.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    blocked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
