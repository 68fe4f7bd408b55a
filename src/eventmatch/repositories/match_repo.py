"""Data access helpers for the match registry."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import ColumnElement, Select, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventmatch.core.errors import ConflictError
from eventmatch.models import Event, EventRegistration, Match, Message

from .swipe_repo import SwipeLedger

__all__ = ["LikeOutcome", "MatchRegistry", "canonical_pair", "pair_lock_statement"]

logger = logging.getLogger(__name__)


def canonical_pair(user_a: int, user_b: int) -> tuple[int, int]:
    """Return the pair in ascending order, the only order stored in a match row."""
    return (user_a, user_b) if user_a < user_b else (user_b, user_a)


def pair_lock_statement(event_id: int, user_a: int, user_b: int) -> Select[tuple[EventRegistration]]:
    """Row locks on both registrations of a pair, always taken in ascending user order."""
    return (
        select(EventRegistration)
        .where(
            EventRegistration.event_id == event_id,
            EventRegistration.user_id.in_(canonical_pair(user_a, user_b)),
        )
        .order_by(EventRegistration.user_id)
        .with_for_update()
    )


def _involves(user_id: int) -> ColumnElement[bool]:
    return or_(Match.user_low_id == user_id, Match.user_high_id == user_id)


@dataclass(frozen=True)
class LikeOutcome:
    """Result of recording a like.

    ``created`` is only True for the caller whose insert produced the match row;
    a caller that lost a concurrent race gets ``matched=True, created=False``.
    """

    matched: bool
    match: Match | None = None
    created: bool = False


class MatchRegistry:
    """Thin wrapper around database access for match entities.

    Like the ledger, the registry flushes but never commits.
    """

    def __init__(self, session: Session, ledger: SwipeLedger | None = None) -> None:
        """Initialize the registry with a SQLAlchemy session."""
        self.session = session
        self.ledger = ledger or SwipeLedger(session)

    def like_and_maybe_match(self, event_id: int, liker_id: int, liked_id: int) -> LikeOutcome:
        """Record a like and create the match when the other side already liked back.

        Must run inside the caller's transaction: the swipe, the reciprocal
        lookup and the match insert are committed or rolled back together.
        Both registrations of the pair are locked first, so two opposite likes
        on the same pair run one after the other and the second one always
        sees the first one's swipe.

        Raises:
            ConflictError: If ``liker_id`` already evaluated ``liked_id`` in the event.
        """
        self.lock_pair(event_id, liker_id, liked_id)
        if self.ledger.has_swiped(event_id, liker_id, liked_id):
            raise ConflictError("You have already seen this profile")
        self.ledger.record_swipe(event_id, liker_id, liked_id, is_like=True)
        if self.ledger.find_reciprocal(event_id, liker_id, liked_id) is None:
            return LikeOutcome(matched=False)
        match, created = self.create_or_get(event_id, liker_id, liked_id)
        return LikeOutcome(matched=True, match=match, created=created)

    def lock_pair(self, event_id: int, user_a: int, user_b: int) -> None:
        """Hold the pair's registration rows until the current transaction ends.

        SQLite has no ``FOR UPDATE``; it serialises writers on its own.
        """
        self.session.execute(pair_lock_statement(event_id, user_a, user_b)).all()

    def get(self, match_id: int) -> Match | None:
        """Return a match by identifier."""
        return self.session.get(Match, match_id)

    def find_by_pair(self, event_id: int, user_a: int, user_b: int) -> Match | None:
        """Return the match between two users regardless of argument order."""
        low, high = canonical_pair(user_a, user_b)
        stmt = select(Match).where(
            Match.event_id == event_id,
            Match.user_low_id == low,
            Match.user_high_id == high,
        )
        return self.session.execute(stmt).scalars().first()

    def get_for_participant(self, match_id: int, user_id: int) -> Match | None:
        """Return the match only when ``user_id`` is one of its participants."""
        stmt = select(Match).where(Match.id == match_id, _involves(user_id))
        return self.session.execute(stmt).scalars().first()

    def is_participant(self, match_id: int, user_id: int) -> bool:
        """Return True if ``user_id`` belongs to the match."""
        return self.get_for_participant(match_id, user_id) is not None

    def create_or_get(self, event_id: int, user_a: int, user_b: int) -> tuple[Match, bool]:
        """Insert the canonical match row, or return the one a concurrent writer won.

        The insert runs inside a SAVEPOINT so a unique violation only discards
        the match insert and leaves the caller's swipe in place.

        Returns:
            The match and whether this call inserted it.
        """
        low, high = canonical_pair(user_a, user_b)
        match = Match(event_id=event_id, user_low_id=low, user_high_id=high)
        try:
            with self.session.begin_nested():
                self.session.add(match)
        except IntegrityError:
            existing = self.find_by_pair(event_id, low, high)
            if existing is None:
                raise
            logger.debug("Match %s already created for event %s, reusing it", existing.id, event_id)
            return existing, False
        logger.info("Match %s created in event %s between %s and %s", match.id, event_id, low, high)
        return match, True

    def archive_for_user(self, event_id: int, user_id: int) -> list[int]:
        """Freeze every match of ``user_id`` in the event and return their ids."""
        return self._set_archived(event_id, user_id, True)

    def unarchive_for_user(self, event_id: int, user_id: int) -> list[int]:
        """Reopen every match of ``user_id`` in the event and return their ids."""
        return self._set_archived(event_id, user_id, False)

    def _set_archived(self, event_id: int, user_id: int, archived: bool) -> list[int]:
        ids = list(
            self.session.execute(
                select(Match.id).where(Match.event_id == event_id, _involves(user_id))
            ).scalars()
        )
        if ids:
            self.session.execute(
                update(Match).where(Match.id.in_(ids)).values(is_archived=archived)
            )
        logger.info(
            "%s %d match(es) of user %s in event %s",
            "Archived" if archived else "Unarchived",
            len(ids),
            user_id,
            event_id,
        )
        return ids

    def delete_for_user(self, event_id: int, user_id: int) -> list[int]:
        """Erase the user's matches in the event.

        Messages go first, then the matches, then every swipe by or about the
        user, so no message is ever left without its match.
        """
        ids = list(
            self.session.execute(
                select(Match.id).where(Match.event_id == event_id, _involves(user_id))
            ).scalars()
        )
        if ids:
            self.session.execute(delete(Message).where(Message.match_id.in_(ids)))
            self.session.execute(delete(Match).where(Match.id.in_(ids)))
        swipes = self.ledger.delete_for_user(event_id, user_id)
        logger.info(
            "Deleted %d match(es) and %d swipe(s) of user %s in event %s",
            len(ids),
            swipes,
            user_id,
            event_id,
        )
        return ids

    def list_for_user_in_event(
        self, user_id: int, event_id: int, limit: int, offset: int = 0
    ) -> list[Match]:
        """Return the user's matches in one event, newest first."""
        stmt = (
            select(Match)
            .where(Match.event_id == event_id, _involves(user_id))
            .order_by(Match.created_at.desc(), Match.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(self.session.execute(stmt).scalars())

    def count_for_user(self, user_id: int) -> int:
        """Return how many matches ``user_id`` has across all events."""
        stmt = select(func.count(Match.id)).where(_involves(user_id))
        return int(self.session.execute(stmt).scalar_one())

    def list_for_user(self, user_id: int, limit: int, offset: int = 0) -> list[tuple[Match, Event]]:
        """Return the user's matches across events with their event, newest first."""
        stmt = (
            select(Match, Event)
            .join(Event, Event.id == Match.event_id)
            .where(_involves(user_id))
            .order_by(Match.created_at.desc(), Match.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return [(match, event) for match, event in self.session.execute(stmt).all()]

    def list_conversations(
        self,
        user_id: int,
        limit: int,
        offset: int = 0,
        event_id: int | None = None,
    ) -> list[tuple[Match, Event]]:
        """Return matches ordered by last activity (last message, else creation)."""
        last_sent = (
            select(func.max(Message.sent_at))
            .where(Message.match_id == Match.id)
            .correlate(Match)
            .scalar_subquery()
        )
        stmt = select(Match, Event).join(Event, Event.id == Match.event_id).where(_involves(user_id))
        if event_id is not None:
            stmt = stmt.where(Match.event_id == event_id)
        stmt = (
            stmt.order_by(func.coalesce(last_sent, Match.created_at).desc(), Match.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return [(match, event) for match, event in self.session.execute(stmt).all()]
