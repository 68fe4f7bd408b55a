"""Data access helpers for the swipe ledger."""
from __future__ import annotations

import logging

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventmatch.core.errors import ConflictError
from eventmatch.models import Swipe

__all__ = ["SwipeLedger"]

logger = logging.getLogger(__name__)


class SwipeLedger:
    """Append-only record of like/pass decisions.

    The ledger never commits; callers own the transaction boundary so a swipe
    and the match it may produce land atomically.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the ledger with a SQLAlchemy session."""
        self.session = session

    def has_swiped(self, event_id: int, liker_id: int, liked_id: int) -> bool:
        """Return True if ``liker_id`` already evaluated ``liked_id`` in the event."""
        stmt = select(Swipe.id).where(
            Swipe.event_id == event_id,
            Swipe.liker_id == liker_id,
            Swipe.liked_id == liked_id,
        )
        return self.session.execute(stmt).first() is not None

    def find_reciprocal(self, event_id: int, liker_id: int, liked_id: int) -> Swipe | None:
        """Return the opposite-direction *like* (``liked_id`` → ``liker_id``), if any."""
        stmt = select(Swipe).where(
            Swipe.event_id == event_id,
            Swipe.liker_id == liked_id,
            Swipe.liked_id == liker_id,
            Swipe.is_like.is_(True),
        )
        return self.session.execute(stmt).scalars().first()

    def record_swipe(self, event_id: int, liker_id: int, liked_id: int, is_like: bool) -> Swipe:
        """Insert a decision and return the flushed row.

        Args:
            event_id: Event the decision belongs to.
            liker_id: User making the decision.
            liked_id: User being evaluated.
            is_like: True for a like, False for a pass.

        Raises:
            ConflictError: If the ordered pair was already evaluated in this event,
                whatever ``is_like`` was the first time.
        """
        swipe = Swipe(event_id=event_id, liker_id=liker_id, liked_id=liked_id, is_like=is_like)
        try:
            with self.session.begin_nested():
                self.session.add(swipe)
        except IntegrityError as exc:
            raise ConflictError("You have already seen this profile") from exc
        logger.debug(
            "Recorded %s in event %s: %s -> %s",
            "like" if is_like else "pass",
            event_id,
            liker_id,
            liked_id,
        )
        return swipe

    def delete_for_user(self, event_id: int, user_id: int) -> int:
        """Remove every swipe made by or about ``user_id`` in the event."""
        result = self.session.execute(
            delete(Swipe)
            .where(
                Swipe.event_id == event_id,
                or_(Swipe.liker_id == user_id, Swipe.liked_id == user_id),
            )
        )
        return result.rowcount or 0
