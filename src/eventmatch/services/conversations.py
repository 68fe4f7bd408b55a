# src/eventmatch/services/conversations.py
"""Conversation lists, message threads and message mutations."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from eventmatch.core.errors import ForbiddenError, NotFoundError, ValidationError
from eventmatch.core.settings import settings
from eventmatch.models import Event, Match, Message
from eventmatch.repositories import MatchRegistry, MessageRepository
from eventmatch.schemas import (
    ConversationEvent,
    ConversationHeader,
    ConversationSummary,
    ConversationThread,
    EventConversations,
    LastMessage,
    LikeToggle,
    MessageResponse,
    ReadReceipt,
)

from .directory import ProfileDirectory
from .membership import MembershipGate, get_event
from .notifier import RealtimeNotifier
from .visibility import VisibilityMediator, is_event_active, present_profile

logger = logging.getLogger(__name__)


class ConversationService:
    """Reads and writes on match conversations for one request."""

    def __init__(self, db: Session, notifier: RealtimeNotifier) -> None:
        self.db = db
        self.notifier = notifier
        self.gate = MembershipGate(db)
        self.registry = MatchRegistry(db)
        self.messages = MessageRepository(db)
        self.directory = ProfileDirectory(db)
        self.visibility = VisibilityMediator(self.gate)

    def _summaries(
        self,
        rows: list[tuple[Match, Event]],
        user_id: int,
    ) -> list[tuple[Event, ConversationSummary, bool]]:
        match_ids = [match.id for match, _ in rows]
        last = self.messages.last_messages(match_ids)
        unread = self.messages.unread_counts(match_ids, user_id)

        # One block lookup per distinct event.
        participants: dict[int, set[int]] = {}
        for match, event in rows:
            participants.setdefault(event.id, {user_id}).add(match.other_user_id(user_id))
        blocked = {
            event_id: self.gate.blocked_user_ids(event_id, user_ids)
            for event_id, user_ids in participants.items()
        }

        summaries = []
        for match, event in rows:
            flags = self.visibility.conversation_visibility(
                match, event, user_id, blocked_ids=blocked[event.id]
            )
            other_id = match.other_user_id(user_id)
            user = present_profile(
                self.directory.get_profile_summary(other_id, event.id), flags.hides_profile
            )
            message = last.get(match.id)
            summary = ConversationSummary(
                match_id=match.id,
                is_archived=flags.is_archived,
                is_event_expired=flags.is_event_expired,
                is_blocked=flags.is_current_user_blocked,
                is_other_user_blocked=flags.is_other_user_blocked,
                user=user,
                last_message=(
                    LastMessage(
                        content=message.content,
                        sent_at=message.sent_at,
                        is_mine=message.sender_id == user_id,
                    )
                    if message is not None
                    else None
                ),
                unread_count=unread.get(match.id, 0),
            )
            summaries.append((event, summary, flags.is_current_user_blocked))
        return summaries

    def list_all_conversations(
        self, user_id: int, limit: int, offset: int = 0
    ) -> list[EventConversations]:
        """Return the caller's conversations grouped by event.

        Groups follow the order of their most recently active conversation.
        """
        rows = self.registry.list_conversations(user_id, limit, offset)
        groups: dict[int, EventConversations] = {}
        for event, summary, is_blocked in self._summaries(rows, user_id):
            group = groups.get(event.id)
            if group is None:
                group = groups[event.id] = EventConversations(
                    event=ConversationEvent(
                        id=event.id,
                        name=event.name,
                        is_expired=not is_event_active(event),
                        is_blocked=is_blocked,
                    ),
                    conversations=[],
                )
            group.conversations.append(summary)
        return list(groups.values())

    def list_event_conversations(
        self, event_id: int, user_id: int, limit: int, offset: int = 0
    ) -> EventConversations:
        """Return the caller's conversations inside one event.

        Raises:
            NotFoundError: If the event does not exist.
            ForbiddenError: If the caller is not registered for it.
        """
        event = get_event(self.db, event_id)
        self.gate.require_registered(event_id, user_id)
        rows = self.registry.list_conversations(user_id, limit, offset, event_id=event_id)
        return EventConversations(
            event=ConversationEvent(
                id=event.id,
                name=event.name,
                is_expired=not is_event_active(event),
                is_blocked=self.gate.is_blocked(event_id, user_id),
            ),
            conversations=[summary for _, summary, _ in self._summaries(rows, user_id)],
        )

    def _participant_match(self, match_id: int, user_id: int, event_id: int | None) -> Match:
        match = self.registry.get_for_participant(match_id, user_id)
        if match is None:
            raise NotFoundError("Conversation not found")
        if event_id is not None and match.event_id != event_id:
            raise NotFoundError("Conversation not found for this event")
        return match

    def get_messages(
        self,
        match_id: int,
        user_id: int,
        *,
        event_id: int | None = None,
        limit: int,
        before_id: int | None = None,
    ) -> ConversationThread:
        """Return a page of messages, marking the caller's incoming ones as read.

        Reading stays allowed on archived, blocked and expired conversations.
        """
        match = self._participant_match(match_id, user_id, event_id)
        try:
            self.messages.mark_all_as_read(match.id, user_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        page = self.messages.list_page(match.id, limit, before_id)

        event = get_event(self.db, match.event_id)
        flags = self.visibility.conversation_visibility(match, event, user_id)
        other_id = match.other_user_id(user_id)
        user = present_profile(
            self.directory.get_profile_summary(other_id, event.id), flags.hides_profile
        )
        return ConversationThread(
            match=ConversationHeader(
                id=match.id,
                event_id=event.id,
                event_name=event.name,
                user=user,
                is_blocked=flags.is_current_user_blocked,
                is_other_user_blocked=flags.is_other_user_blocked,
                is_archived=flags.is_archived,
                is_event_expired=flags.is_event_expired,
                status=flags.status.value,
            ),
            messages=[MessageResponse.model_validate(message) for message in page],
        )

    async def send_message(
        self,
        match_id: int,
        user_id: int,
        content: str | None,
        *,
        event_id: int | None = None,
    ) -> MessageResponse:
        """Append a message to a conversation and notify the room.

        Raises:
            ValidationError: If the trimmed content is empty or too long.
            NotFoundError: If the caller has no such conversation.
            ForbiddenError: If the conversation is archived or the counterpart blocked.
            UserBlockedError: If the caller is blocked in the event.
            EventExpiredError: If the event window is over.
        """
        text = (content or "").strip()
        if not text:
            raise ValidationError("Message content is required")
        if len(text) > settings.message_max_length:
            raise ValidationError(
                f"Message is too long (max {settings.message_max_length} characters)"
            )

        match = self._participant_match(match_id, user_id, event_id)
        event = get_event(self.db, match.event_id)
        flags = self.visibility.conversation_visibility(match, event, user_id)
        flags.require_can_send()

        try:
            message = self.messages.create(match.id, user_id, text)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.debug("Message %s sent on match %s by user %s", message.id, match.id, user_id)

        payload = MessageResponse.model_validate(message)
        await self.notifier.message_created(match.id, payload, user_id)
        await self.notifier.conversation_updated(
            match.other_user_id(user_id),
            {
                "match_id": match.id,
                "last_message": {
                    "content": payload.content,
                    "sent_at": payload.sent_at.isoformat(),
                    "is_mine": False,
                },
            },
        )
        return payload

    def _message_for_participant(self, message_id: int, user_id: int) -> Message:
        row = self.messages.get_with_match(message_id)
        if row is None:
            raise NotFoundError("Message not found")
        message, match = row
        if not match.has_participant(user_id):
            raise ForbiddenError("Access denied")
        return message

    def mark_message_as_read(self, message_id: int, user_id: int) -> ReadReceipt:
        """Mark one incoming message as read. Marking twice is a no-op.

        Raises:
            NotFoundError: If the message does not exist.
            ForbiddenError: If the caller is not in the conversation.
            ValidationError: If the caller sent the message.
        """
        message = self._message_for_participant(message_id, user_id)
        if message.sender_id == user_id:
            raise ValidationError("You cannot mark your own messages as read")
        if not message.is_read:
            message.is_read = True
            try:
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
        return ReadReceipt(is_read=message.is_read)

    def toggle_like(self, message_id: int, user_id: int) -> LikeToggle:
        """Flip the like reaction of a message for either participant."""
        message = self._message_for_participant(message_id, user_id)
        message.is_liked = not message.is_liked
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return LikeToggle(is_liked=message.is_liked)
