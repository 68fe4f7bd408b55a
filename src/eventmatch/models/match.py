# src/eventmatch/models/match.py
"""Mutual matches and the messages exchanged on them."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from eventmatch.db.session import Base
from eventmatch.db.time import utcnow


class Match(Base):
    """Canonical record of two users who liked each other in an event.

    The pair is always stored ascending so that the unique constraint covers
    both swipe directions without looking at two orderings.
    """

    __tablename__ = "event_match"
    __table_args__ = (
        UniqueConstraint("event_id", "user_low_id", "user_high_id", name="uq_match_event_pair"),
        CheckConstraint("user_low_id < user_high_id", name="ck_match_pair_ordered"),
        Index("ix_match_event_low", "event_id", "user_low_id"),
        Index("ix_match_event_high", "event_id", "user_high_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("event.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_low_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_high_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def other_user_id(self, user_id: int) -> int:
        """Return the participant that is not ``user_id``."""
        return self.user_high_id if self.user_low_id == user_id else self.user_low_id

    def has_participant(self, user_id: int) -> bool:
        """Return True when ``user_id`` is one of the two matched users."""
        return user_id in (self.user_low_id, self.user_high_id)


class Message(Base):
    """Plain-text message sent by one participant of a match."""

    __tablename__ = "message"
    __table_args__ = (
        Index("ix_message_match_sent", "match_id", "sent_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("event_match.id"),
        nullable=False,
    )
    sender_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    sent_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    # Only the recipient flips this to True.
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_liked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
