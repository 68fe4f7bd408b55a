"""Data access helpers for conversation messages."""
from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from eventmatch.models import Match, Message

__all__ = ["MessageRepository"]


class MessageRepository:
    """Messages attached to matches, with read and like flags."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def create(self, match_id: int, sender_id: int, content: str) -> Message:
        """Insert a new message and return the flushed ORM instance."""
        message = Message(match_id=match_id, sender_id=sender_id, content=content)
        self.session.add(message)
        self.session.flush()
        return message

    def get_with_match(self, message_id: int) -> tuple[Message, Match] | None:
        """Return a message together with the match it belongs to."""
        stmt = (
            select(Message, Match)
            .join(Match, Match.id == Message.match_id)
            .where(Message.id == message_id)
        )
        row = self.session.execute(stmt).first()
        if row is None:
            return None
        return row[0], row[1]

    def list_page(self, match_id: int, limit: int, before_id: int | None = None) -> list[Message]:
        """Return up to ``limit`` messages in chronological order.

        Args:
            match_id: Conversation to read.
            limit: Page size.
            before_id: Only return messages with a smaller id (backward pagination).

        Returns:
            The newest ``limit`` messages older than the cursor, oldest first.
        """
        stmt = select(Message).where(Message.match_id == match_id)
        if before_id is not None:
            stmt = stmt.where(Message.id < before_id)
        stmt = stmt.order_by(Message.sent_at.desc(), Message.id.desc()).limit(limit)
        messages = list(self.session.execute(stmt).scalars())
        messages.reverse()
        return messages

    def mark_all_as_read(self, match_id: int, reader_id: int) -> int:
        """Flag every unread message not sent by ``reader_id`` as read."""
        result = self.session.execute(
            update(Message)
            .where(
                Message.match_id == match_id,
                Message.sender_id != reader_id,
                Message.is_read.is_(False),
            )
            .values(is_read=True)
        )
        return result.rowcount or 0

    def last_messages(self, match_ids: Sequence[int]) -> dict[int, Message]:
        """Return the latest message of each match that has one."""
        if not match_ids:
            return {}
        latest = (
            select(func.max(Message.id).label("id"))
            .where(Message.match_id.in_(match_ids))
            .group_by(Message.match_id)
            .subquery()
        )
        stmt = select(Message).join(latest, latest.c.id == Message.id)
        return {message.match_id: message for message in self.session.execute(stmt).scalars()}

    def unread_counts(self, match_ids: Sequence[int], reader_id: int) -> dict[int, int]:
        """Return, per match, how many messages addressed to ``reader_id`` are unread."""
        if not match_ids:
            return {}
        stmt = (
            select(Message.match_id, func.count(Message.id))
            .where(
                Message.match_id.in_(match_ids),
                Message.sender_id != reader_id,
                Message.is_read.is_(False),
            )
            .group_by(Message.match_id)
        )
        return {match_id: int(count) for match_id, count in self.session.execute(stmt).all()}
