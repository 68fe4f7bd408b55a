# tests/services/test_participant_actions.py
"""Tests for organiser-side block, unblock and removal of participants."""

import pytest

from eventmatch.core.errors import ConflictError, NotFoundError
from eventmatch.models import EventBlockedUser, EventRegistration, Match, Message, Swipe
from eventmatch.services import MembershipGate, ParticipantService, RemovalAction


@pytest.fixture()
def service(db_session) -> ParticipantService:
    return ParticipantService(db_session)


def test_block_archives_matches_and_blocks(service, db_session, event, participants, match) -> None:
    _, bob, _ = participants

    archived = service.block_participant(event.id, bob.id, reason="spam")

    assert archived == [match.id]
    assert db_session.get(Match, match.id).is_archived is True
    entry = db_session.get(EventBlockedUser, (event.id, bob.id))
    assert entry is not None
    assert entry.reason == "spam"


def test_block_twice_conflicts(service, event, participants) -> None:
    _, bob, _ = participants
    service.block_participant(event.id, bob.id)

    with pytest.raises(ConflictError):
        service.block_participant(event.id, bob.id)


def test_unblock_restores_matches(service, db_session, event, participants, match) -> None:
    _, bob, _ = participants
    service.block_participant(event.id, bob.id)

    reopened = service.unblock_participant(event.id, bob.id)

    assert reopened == [match.id]
    assert db_session.get(Match, match.id).is_archived is False
    assert not MembershipGate(db_session).is_blocked(event.id, bob.id)


def test_unblock_unknown_block_is_not_found(service, event, participants) -> None:
    _, bob, _ = participants
    with pytest.raises(NotFoundError):
        service.unblock_participant(event.id, bob.id)


def test_remove_with_block_keeps_history(service, db_session, event, participants, match, make_message) -> None:
    alice, bob, _ = participants
    make_message(match, alice, "hello")

    action = service.remove_participant(event.id, bob.id)

    assert action is RemovalAction.BLOCK
    assert db_session.get(Match, match.id).is_archived is True
    assert db_session.query(Message).count() == 1
    assert MembershipGate(db_session).is_blocked(event.id, bob.id)
    assert MembershipGate(db_session).is_registered(event.id, bob.id)


def test_remove_with_delete_erases_everything(
    service, db_session, event, participants, match, make_message
) -> None:
    alice, bob, carol = participants
    db_session.add_all(
        [
            Swipe(event_id=event.id, liker_id=alice.id, liked_id=bob.id, is_like=True),
            Swipe(event_id=event.id, liker_id=bob.id, liked_id=alice.id, is_like=True),
            Swipe(event_id=event.id, liker_id=alice.id, liked_id=carol.id, is_like=False),
        ]
    )
    db_session.commit()
    make_message(match, alice, "hello")

    service.remove_participant(event.id, bob.id, action="delete")

    assert db_session.query(Match).count() == 0
    assert db_session.query(Message).count() == 0
    assert db_session.query(Swipe).count() == 1
    assert db_session.get(EventRegistration, (bob.id, event.id)) is None
    assert db_session.get(EventRegistration, (alice.id, event.id)) is not None


def test_remove_unregistered_participant_is_not_found(service, event, make_user) -> None:
    outsider = make_user("Dan")
    with pytest.raises(NotFoundError):
        service.remove_participant(event.id, outsider.id)


def test_unknown_event_is_not_found(service, participants) -> None:
    _, bob, _ = participants
    with pytest.raises(NotFoundError):
        service.block_participant(9999, bob.id)


def test_block_losing_a_concurrent_block_conflicts(
    mocker, service, db_session, event, participants, match, block
) -> None:
    _, bob, _ = participants
    # Committed by another request after this one checked for an existing block.
    db_session.expunge(block(bob, event))
    mocker.patch.object(service.gate, "is_blocked", return_value=False)

    with pytest.raises(ConflictError):
        service.block_participant(event.id, bob.id)

    assert db_session.get(Match, match.id).is_archived is False
    assert db_session.query(EventBlockedUser).count() == 1
