# src/eventmatch/services/membership.py
"""Event membership checks consumed before every swipe or message mutation."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from eventmatch.core.errors import ForbiddenError, NotFoundError, UserBlockedError
from eventmatch.models import Event, EventBlockedUser, EventRegistration

logger = logging.getLogger(__name__)


def get_event(db: Session, event_id: int) -> Event:
    """Return the event or raise :class:`NotFoundError`."""
    event = db.get(Event, event_id)
    if event is None:
        raise NotFoundError("Event not found")
    return event


class MembershipGate:
    """Answers "is the user registered" and "is the user blocked" for an event."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_registration(self, event_id: int, user_id: int) -> EventRegistration | None:
        return self.session.get(EventRegistration, (user_id, event_id))

    def is_registered(self, event_id: int, user_id: int) -> bool:
        return self.get_registration(event_id, user_id) is not None

    def is_blocked(self, event_id: int, user_id: int) -> bool:
        return self.session.get(EventBlockedUser, (event_id, user_id)) is not None

    def blocked_user_ids(self, event_id: int, user_ids: Iterable[int]) -> set[int]:
        """Return the subset of ``user_ids`` blocked in the event, in one query."""
        ids = set(user_ids)
        if not ids:
            return set()
        stmt = select(EventBlockedUser.user_id).where(
            EventBlockedUser.event_id == event_id,
            EventBlockedUser.user_id.in_(ids),
        )
        return set(self.session.execute(stmt).scalars())

    def require_registered(self, event_id: int, user_id: int) -> EventRegistration:
        """Return the caller's registration or raise :class:`ForbiddenError`."""
        registration = self.get_registration(event_id, user_id)
        if registration is None:
            raise ForbiddenError("You must be registered for this event")
        return registration

    def require_active_participant(self, event_id: int, user_id: int) -> EventRegistration:
        """Registered and not blocked by the organiser.

        Raises:
            ForbiddenError: If the user is not registered.
            UserBlockedError: If the user is blocked in the event.
        """
        registration = self.require_registered(event_id, user_id)
        if self.is_blocked(event_id, user_id):
            raise UserBlockedError()
        return registration

    def block(self, event_id: int, user_id: int, reason: str | None = None) -> EventBlockedUser:
        entry = EventBlockedUser(event_id=event_id, user_id=user_id, reason=reason)
        self.session.add(entry)
        self.session.flush()
        return entry

    def unblock(self, event_id: int, user_id: int) -> bool:
        result = self.session.execute(
            delete(EventBlockedUser).where(
                EventBlockedUser.event_id == event_id,
                EventBlockedUser.user_id == user_id,
            )
        )
        return bool(result.rowcount)

    def delete_registration(self, event_id: int, user_id: int) -> bool:
        result = self.session.execute(
            delete(EventRegistration).where(
                EventRegistration.event_id == event_id,
                EventRegistration.user_id == user_id,
            )
        )
        return bool(result.rowcount)
