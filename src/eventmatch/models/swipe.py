# src/eventmatch/models/swipe.py
"""Ledger of like/pass decisions."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from eventmatch.db.session import Base
from eventmatch.db.time import utcnow


class Swipe(Base):
    """One user's decision about another user within an event.

    Rows are append-only: a decision is never updated, and a second decision
    for the same ordered pair is rejected by the unique constraint.
    """

    __tablename__ = "swipe"
    __table_args__ = (
        UniqueConstraint("event_id", "liker_id", "liked_id", name="uq_swipe_event_pair"),
        CheckConstraint("liker_id <> liked_id", name="ck_swipe_not_self"),
        Index("ix_swipe_event_liked", "event_id", "liked_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("event.id", ondelete="CASCADE"),
        nullable=False,
    )
    liker_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    liked_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    # True = like, False = pass.
    is_like: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
