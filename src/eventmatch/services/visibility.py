# src/eventmatch/services/visibility.py
"""Derived read-only and redaction state of conversations.

Nothing here is stored: blocks live in the membership tables and expiry in the
event window, so lifting a block changes the next read without touching any
match or message row.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from eventmatch.core.errors import EventExpiredError, ForbiddenError, UserBlockedError
from eventmatch.core.settings import settings
from eventmatch.db.time import as_utc, utcnow
from eventmatch.models import Event, Match
from eventmatch.schemas import ProfileSummary

from .membership import MembershipGate

ARCHIVED_MESSAGE = "This conversation is archived and read-only"


def is_event_active(event: Event, now: datetime | None = None) -> bool:
    """Return True while the event's application window is open.

    An event without ``app_end_at`` never expires.
    """
    if event.app_end_at is None:
        return True
    return (now or utcnow()) < as_utc(event.app_end_at)


class ConversationStatus(str, Enum):
    """Effective state of a match thread."""

    ACTIVE = "active"
    READ_ONLY_EXPIRED = "read_only_expired"
    READ_ONLY_ARCHIVED = "read_only_archived"


@dataclass(frozen=True)
class ConversationVisibility:
    """Visibility flags of one conversation from one participant's point of view."""

    is_current_user_blocked: bool
    is_other_user_blocked: bool
    is_event_expired: bool
    is_archived: bool

    @property
    def hides_profile(self) -> bool:
        return self.is_current_user_blocked or self.is_other_user_blocked

    @property
    def status(self) -> ConversationStatus:
        if self.is_archived or self.hides_profile:
            return ConversationStatus.READ_ONLY_ARCHIVED
        if self.is_event_expired:
            return ConversationStatus.READ_ONLY_EXPIRED
        return ConversationStatus.ACTIVE

    @property
    def can_send(self) -> bool:
        return self.status is ConversationStatus.ACTIVE

    def require_can_send(self) -> None:
        """Raise the error explaining why a message cannot be sent, if any.

        Raises:
            ForbiddenError: If the match is archived or the counterpart is blocked.
            UserBlockedError: If the viewer is blocked in the event.
            EventExpiredError: If the event window is over.
        """
        if self.can_send:
            return
        if self.is_archived:
            raise ForbiddenError(ARCHIVED_MESSAGE)
        if self.is_current_user_blocked:
            raise UserBlockedError()
        if self.is_other_user_blocked:
            raise ForbiddenError(ARCHIVED_MESSAGE)
        raise EventExpiredError()


def redacted_profile(user_id: int) -> ProfileSummary:
    """Placeholder shown instead of a blocked counterpart."""
    return ProfileSummary(id=user_id, firstname=settings.redacted_firstname, lastname="", photos=[])


def present_profile(summary: ProfileSummary, hidden: bool) -> ProfileSummary:
    """Return ``summary`` unchanged, or its placeholder when ``hidden``."""
    return redacted_profile(summary.id) if hidden else summary


class VisibilityMediator:
    """Composes membership state and event expiry into conversation visibility."""

    def __init__(self, gate: MembershipGate) -> None:
        self.gate = gate

    def conversation_visibility(
        self,
        match: Match,
        event: Event,
        viewer_id: int,
        blocked_ids: set[int] | None = None,
    ) -> ConversationVisibility:
        """Compute the flags of ``match`` as seen by ``viewer_id``.

        Args:
            match: Conversation being displayed.
            event: Event the match belongs to.
            viewer_id: Participant reading the conversation.
            blocked_ids: Users already known to be blocked in ``event``. When
                given, no membership query is issued, which lets list views
                check blocks once per event.
        """
        other_id = match.other_user_id(viewer_id)
        if blocked_ids is None:
            blocked_ids = self.gate.blocked_user_ids(event.id, (viewer_id, other_id))
        return ConversationVisibility(
            is_current_user_blocked=viewer_id in blocked_ids,
            is_other_user_blocked=other_id in blocked_ids,
            is_event_expired=not is_event_active(event),
            is_archived=match.is_archived,
        )
