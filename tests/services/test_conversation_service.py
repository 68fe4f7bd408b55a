# tests/services/test_conversation_service.py
"""Tests for sending, reading and reacting to messages."""

from datetime import timedelta

import pytest

from eventmatch.core.errors import (
    EventExpiredError,
    ForbiddenError,
    NotFoundError,
    UserBlockedError,
    ValidationError,
)
from eventmatch.core.settings import settings
from eventmatch.models import Message
from eventmatch.services import ConversationService


@pytest.fixture()
def service(db_session, notifier) -> ConversationService:
    return ConversationService(db_session, notifier)


@pytest.mark.asyncio
async def test_send_message_trims_and_persists(service, participants, match) -> None:
    alice, bob, _ = participants

    message = await service.send_message(match.id, bob.id, "  hello  ")

    assert message.content == "hello"
    assert message.sender_id == bob.id
    assert message.is_read is False
    assert message.is_liked is False


@pytest.mark.asyncio
async def test_send_message_notifies_room_and_counterpart_only(
    service, notifier, participants, match
) -> None:
    alice, bob, _ = participants

    message = await service.send_message(match.id, bob.id, "hello")

    created = notifier.events("message:created")
    assert created == [
        (
            f"match:{match.id}",
            {
                "match_id": match.id,
                "message": message.model_dump(mode="json"),
                "sender_id": bob.id,
            },
        )
    ]
    updated = notifier.events("conversation:updated")
    assert [room for room, _ in updated] == [f"user:{alice.id}"]
    assert updated[0][1]["last_message"]["is_mine"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [None, "", "   \n\t "])
async def test_send_message_rejects_empty_content(service, participants, match, content) -> None:
    _, bob, _ = participants
    with pytest.raises(ValidationError):
        await service.send_message(match.id, bob.id, content)


@pytest.mark.asyncio
async def test_send_message_length_limit(service, participants, match) -> None:
    _, bob, _ = participants
    limit = settings.message_max_length

    accepted = await service.send_message(match.id, bob.id, "x" * limit)
    assert len(accepted.content) == limit

    with pytest.raises(ValidationError):
        await service.send_message(match.id, bob.id, "x" * (limit + 1))


@pytest.mark.asyncio
async def test_send_message_requires_participant(service, participants, match) -> None:
    _, _, carol = participants
    with pytest.raises(NotFoundError):
        await service.send_message(match.id, carol.id, "hi")


@pytest.mark.asyncio
async def test_send_message_checks_event_scope(service, make_event, participants, match) -> None:
    _, bob, _ = participants
    other = make_event("Winter Gala")
    with pytest.raises(NotFoundError):
        await service.send_message(match.id, bob.id, "hi", event_id=other.id)


@pytest.mark.asyncio
async def test_archived_conversation_is_read_only(
    service, notifier, db_session, event, participants, make_match, make_message
) -> None:
    alice, bob, _ = participants
    archived = make_match(event, alice, bob, archived=True)
    make_message(archived, alice, "before archival")

    with pytest.raises(ForbiddenError) as excinfo:
        await service.send_message(archived.id, bob.id, "hi")
    assert excinfo.value.code == "FORBIDDEN"
    assert notifier.emitted == []

    thread = service.get_messages(archived.id, bob.id, limit=50)
    assert [m.content for m in thread.messages] == ["before archival"]
    assert thread.match.status == "read_only_archived"


@pytest.mark.asyncio
async def test_expired_conversation_is_read_only(
    service, make_event, participants, register, make_match, make_message
) -> None:
    alice, bob, _ = participants
    past = make_event("Last Year", ends_in=timedelta(days=-1))
    register(alice, past)
    register(bob, past)
    expired = make_match(past, alice, bob)
    make_message(expired, bob, "see you")

    with pytest.raises(EventExpiredError) as excinfo:
        await service.send_message(expired.id, alice.id, "too late")
    assert excinfo.value.code == "EVENT_EXPIRED"

    thread = service.get_messages(expired.id, alice.id, limit=50)
    assert thread.match.is_event_expired is True
    assert thread.match.status == "read_only_expired"
    assert [m.content for m in thread.messages] == ["see you"]


@pytest.mark.asyncio
async def test_blocked_sender_cannot_write(service, event, participants, match, block) -> None:
    alice, bob, _ = participants
    block(bob, event)

    with pytest.raises(UserBlockedError):
        await service.send_message(match.id, bob.id, "hi")
    with pytest.raises(ForbiddenError):
        await service.send_message(match.id, alice.id, "hi")


def test_get_messages_marks_incoming_as_read(service, db_session, participants, match, make_message) -> None:
    alice, bob, _ = participants
    incoming = make_message(match, bob, "hello")
    outgoing = make_message(match, alice, "hey")

    thread = service.get_messages(match.id, alice.id, limit=50)

    by_id = {m.id: m for m in thread.messages}
    assert by_id[incoming.id].is_read is True
    assert by_id[outgoing.id].is_read is False
    assert db_session.get(Message, incoming.id).is_read is True


def test_get_messages_paginates_backwards(service, participants, match, make_message) -> None:
    alice, bob, _ = participants
    sent = [make_message(match, bob if i % 2 else alice, f"m{i}") for i in range(5)]

    latest = service.get_messages(match.id, alice.id, limit=2)
    assert [m.content for m in latest.messages] == ["m3", "m4"]

    older = service.get_messages(match.id, alice.id, limit=2, before_id=latest.messages[0].id)
    assert [m.content for m in older.messages] == ["m1", "m2"]

    oldest = service.get_messages(match.id, alice.id, limit=10, before_id=sent[1].id)
    assert [m.content for m in oldest.messages] == ["m0"]


def test_get_messages_checks_event_scope(service, make_event, participants, match) -> None:
    alice, _, _ = participants
    other = make_event("Winter Gala")

    with pytest.raises(NotFoundError):
        service.get_messages(match.id, alice.id, event_id=other.id, limit=10)
    assert service.get_messages(match.id, alice.id, event_id=match.event_id, limit=10).match.id == match.id


def test_get_messages_hides_outsiders(service, participants, match) -> None:
    _, _, carol = participants
    with pytest.raises(NotFoundError):
        service.get_messages(match.id, carol.id, limit=10)


def test_mark_message_as_read_by_recipient_is_idempotent(service, participants, match, make_message) -> None:
    alice, bob, _ = participants
    message = make_message(match, bob, "hello")

    assert service.mark_message_as_read(message.id, alice.id).is_read is True
    assert service.mark_message_as_read(message.id, alice.id).is_read is True


def test_mark_own_message_as_read_is_rejected(service, participants, match, make_message) -> None:
    _, bob, _ = participants
    message = make_message(match, bob, "hello")

    with pytest.raises(ValidationError):
        service.mark_message_as_read(message.id, bob.id)


def test_mark_message_as_read_errors(service, participants, match, make_message) -> None:
    _, bob, carol = participants
    message = make_message(match, bob, "hello")

    with pytest.raises(NotFoundError):
        service.mark_message_as_read(message.id + 100, bob.id)
    with pytest.raises(ForbiddenError):
        service.mark_message_as_read(message.id, carol.id)


def test_toggle_like_flips_for_either_participant(service, participants, match, make_message) -> None:
    alice, bob, carol = participants
    message = make_message(match, bob, "hello")

    assert service.toggle_like(message.id, alice.id).is_liked is True
    assert service.toggle_like(message.id, bob.id).is_liked is False
    with pytest.raises(ForbiddenError):
        service.toggle_like(message.id, carol.id)
