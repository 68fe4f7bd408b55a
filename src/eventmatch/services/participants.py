# src/eventmatch/services/participants.py
"""Organiser-side participant actions and their effect on matches.

These are triggered by the event administration surface. Each action runs in a
single transaction so an archive never lands without its block, and a
permanent removal never leaves messages behind.
"""

from __future__ import annotations

import logging
from enum import Enum

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventmatch.core.errors import ConflictError, NotFoundError
from eventmatch.repositories import MatchRegistry

from .membership import MembershipGate, get_event

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_REASON = "Blocked by the organiser"


class RemovalAction(str, Enum):
    """What happens to a participant removed from an event."""

    BLOCK = "block"
    DELETE = "delete"


class ParticipantService:
    """Block, unblock and remove participants of an event."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.gate = MembershipGate(db)
        self.registry = MatchRegistry(db)

    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def block_participant(self, event_id: int, user_id: int, reason: str | None = None) -> list[int]:
        """Block a user in an event and archive their matches there.

        Returns:
            Identifiers of the archived matches.

        Raises:
            NotFoundError: If the event does not exist.
            ConflictError: If the user is already blocked, including by a
                concurrent request that committed first.
        """
        get_event(self.db, event_id)
        if self.gate.is_blocked(event_id, user_id):
            raise ConflictError("This user is already blocked")
        try:
            archived = self.registry.archive_for_user(event_id, user_id)
            self.gate.block(event_id, user_id, reason or DEFAULT_BLOCK_REASON)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError("This user is already blocked") from exc
        except Exception:
            self.db.rollback()
            raise
        logger.info("Blocked user %s in event %s", user_id, event_id)
        return archived

    def unblock_participant(self, event_id: int, user_id: int) -> list[int]:
        """Lift a block and reopen the user's matches in the event.

        Raises:
            NotFoundError: If the event does not exist or the user is not blocked.
        """
        get_event(self.db, event_id)
        try:
            if not self.gate.unblock(event_id, user_id):
                raise NotFoundError("This user is not blocked")
            reopened = self.registry.unarchive_for_user(event_id, user_id)
        except Exception:
            self.db.rollback()
            raise
        self._commit()
        logger.info("Unblocked user %s in event %s", user_id, event_id)
        return reopened

    def remove_participant(
        self,
        event_id: int,
        user_id: int,
        action: RemovalAction | str = RemovalAction.BLOCK,
    ) -> RemovalAction:
        """Remove a participant, either by blocking them or by erasing their data.

        ``delete`` erases messages, matches, swipes and the registration;
        ``block`` archives the matches and blocks the user, keeping history.

        Raises:
            NotFoundError: If the event does not exist or the user is not registered.
        """
        action = RemovalAction(action)
        get_event(self.db, event_id)
        if not self.gate.is_registered(event_id, user_id):
            raise NotFoundError("This participant is not registered for this event")
        try:
            if action is RemovalAction.DELETE:
                self.registry.delete_for_user(event_id, user_id)
                self.gate.delete_registration(event_id, user_id)
            else:
                self.registry.archive_for_user(event_id, user_id)
                if not self.gate.is_blocked(event_id, user_id):
                    self.gate.block(event_id, user_id, DEFAULT_BLOCK_REASON)
        except Exception:
            self.db.rollback()
            raise
        self._commit()
        logger.info("Removed user %s from event %s (%s)", user_id, event_id, action.value)
        return action
