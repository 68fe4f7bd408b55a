# src/eventmatch/services/matching.py
"""Swiping and match retrieval."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from eventmatch.core.errors import (
    ConflictError,
    EventExpiredError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from eventmatch.models import Event, Match
from eventmatch.repositories import MatchRegistry, SwipeLedger
from eventmatch.schemas import (
    AllMatchesResponse,
    CandidateProfile,
    EventMatches,
    EventRef,
    LikeResponse,
    MatchCreated,
    MatchListItem,
    PassResponse,
)

from .directory import ProfileDirectory
from .membership import MembershipGate, get_event
from .notifier import RealtimeNotifier
from .visibility import is_event_active, present_profile

logger = logging.getLogger(__name__)


class MatchingService:
    """Candidate browsing, like/pass decisions and match listings for one request."""

    def __init__(self, db: Session, notifier: RealtimeNotifier) -> None:
        self.db = db
        self.notifier = notifier
        self.gate = MembershipGate(db)
        self.ledger = SwipeLedger(db)
        self.registry = MatchRegistry(db, self.ledger)
        self.directory = ProfileDirectory(db)

    def get_profiles(self, event_id: int, user_id: int, limit: int) -> list[CandidateProfile]:
        """Return random candidates the caller has not evaluated yet.

        Raises:
            NotFoundError: If the event does not exist.
            EventExpiredError: If the event window is over.
            ForbiddenError: If the caller is not registered.
            UserBlockedError: If the caller is blocked in the event.
        """
        event = get_event(self.db, event_id)
        if not is_event_active(event):
            raise EventExpiredError()
        self.gate.require_active_participant(event_id, user_id)
        return self.directory.candidates(event_id, user_id, limit)

    def _check_swipe(
        self, event_id: int, user_id: int, target_id: int | None
    ) -> tuple[Event, int]:
        if not target_id:
            raise ValidationError("user_id is required")
        if target_id == user_id:
            raise ValidationError("You cannot swipe on yourself")
        event = get_event(self.db, event_id)
        if not is_event_active(event):
            raise EventExpiredError()
        self.gate.require_active_participant(event_id, user_id)
        if not self.gate.is_registered(event_id, target_id):
            raise NotFoundError("This user is not taking part in this event")
        if self.ledger.has_swiped(event_id, user_id, target_id):
            raise ConflictError("You have already seen this profile")
        return event, target_id

    async def like_profile(self, event_id: int, user_id: int, target_id: int | None) -> LikeResponse:
        """Like ``target_id`` and report whether it completed a mutual match.

        The swipe and the possible match are committed together. Only the
        request that actually inserted the match emits ``match:created``.
        """
        event, target_id = self._check_swipe(event_id, user_id, target_id)
        try:
            outcome = self.registry.like_and_maybe_match(event_id, user_id, target_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.debug(
            "User %s liked %s in event %s (matched=%s)", user_id, target_id, event_id, outcome.matched
        )

        if not outcome.matched or outcome.match is None:
            return LikeResponse(matched=False)

        match = outcome.match
        matched_user = self.directory.get_profile_summary(target_id, event_id)
        if outcome.created:
            current_user = self.directory.get_profile_summary(user_id, event_id)
            await self.notifier.match_created(
                user_id,
                target_id,
                {
                    "match_id": match.id,
                    "event_id": event_id,
                    "event_name": event.name,
                    "created_at": match.created_at.isoformat(),
                    "user1": current_user.model_dump(mode="json"),
                    "user2": matched_user.model_dump(mode="json"),
                },
            )
        return LikeResponse(
            matched=True,
            match=MatchCreated(
                id=match.id,
                user=matched_user,
                event_id=event_id,
                created_at=match.created_at,
            ),
        )

    async def pass_profile(self, event_id: int, user_id: int, target_id: int | None) -> PassResponse:
        """Record a pass. A pass never produces a match."""
        _, target_id = self._check_swipe(event_id, user_id, target_id)
        try:
            self.ledger.record_swipe(event_id, user_id, target_id, is_like=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return PassResponse()

    def _list_items(self, matches: list[Match], event_id: int, user_id: int) -> list[MatchListItem]:
        others = [match.other_user_id(user_id) for match in matches]
        blocked = self.gate.blocked_user_ids(event_id, [user_id, *others])
        hidden = user_id in blocked
        items = []
        for match, other_id in zip(matches, others):
            summary = present_profile(
                self.directory.get_profile_summary(other_id, event_id),
                hidden or other_id in blocked,
            )
            items.append(
                MatchListItem(
                    match_id=match.id,
                    user=summary,
                    created_at=match.created_at,
                )
            )
        return items

    def list_event_matches(
        self, event_id: int, user_id: int, limit: int, offset: int = 0
    ) -> list[MatchListItem]:
        """Return the caller's matches in one event, newest first."""
        get_event(self.db, event_id)
        self.gate.require_registered(event_id, user_id)
        matches = self.registry.list_for_user_in_event(user_id, event_id, limit, offset)
        return self._list_items(matches, event_id, user_id)

    def list_all_matches(self, user_id: int, limit: int, offset: int = 0) -> AllMatchesResponse:
        """Return the caller's matches across events, grouped by event."""
        rows = self.registry.list_for_user(user_id, limit, offset)
        events: dict[int, Event] = {}
        grouped: dict[int, list[Match]] = {}
        for match, event in rows:
            events.setdefault(event.id, event)
            grouped.setdefault(event.id, []).append(match)
        by_event = [
            EventMatches(
                event=EventRef(id=event_id, name=events[event_id].name),
                matches=self._list_items(matches, event_id, user_id),
            )
            for event_id, matches in grouped.items()
        ]
        return AllMatchesResponse(total=self.registry.count_for_user(user_id), by_event=by_event)

    def get_match_profile(self, match_id: int, user_id: int) -> CandidateProfile:
        """Return the full event profile of the caller's counterpart.

        Raises:
            NotFoundError: If the match does not exist or the caller is not in it.
            ForbiddenError: If either participant is blocked in the event.
        """
        match = self.registry.get_for_participant(match_id, user_id)
        if match is None:
            raise NotFoundError("Conversation not found")
        if self.gate.is_blocked(match.event_id, user_id):
            raise ForbiddenError("You cannot view this profile")
        other_id = match.other_user_id(user_id)
        if self.gate.is_blocked(match.event_id, other_id):
            raise ForbiddenError("This profile is no longer available")
        return self.directory.get_match_profile(other_id, match.event_id)
