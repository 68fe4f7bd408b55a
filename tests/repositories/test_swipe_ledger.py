# tests/repositories/test_swipe_ledger.py
"""Tests for the swipe ledger."""

import pytest

from eventmatch.core.errors import ConflictError
from eventmatch.models import Swipe
from eventmatch.repositories import SwipeLedger


def test_record_swipe_persists_decision(db_session, event, participants) -> None:
    alice, bob, _ = participants
    ledger = SwipeLedger(db_session)

    swipe = ledger.record_swipe(event.id, alice.id, bob.id, is_like=True)
    db_session.commit()

    assert swipe.id is not None
    assert ledger.has_swiped(event.id, alice.id, bob.id)
    assert not ledger.has_swiped(event.id, bob.id, alice.id)


@pytest.mark.parametrize("second_is_like", [True, False])
def test_second_swipe_on_same_pair_conflicts(db_session, event, participants, second_is_like) -> None:
    alice, bob, _ = participants
    ledger = SwipeLedger(db_session)
    ledger.record_swipe(event.id, alice.id, bob.id, is_like=False)
    db_session.commit()

    with pytest.raises(ConflictError):
        ledger.record_swipe(event.id, alice.id, bob.id, is_like=second_is_like)

    # The original decision is untouched.
    swipes = db_session.query(Swipe).filter_by(event_id=event.id, liker_id=alice.id).all()
    assert len(swipes) == 1
    assert swipes[0].is_like is False


def test_conflict_keeps_earlier_work_in_transaction(db_session, event, participants) -> None:
    alice, bob, carol = participants
    ledger = SwipeLedger(db_session)
    ledger.record_swipe(event.id, alice.id, bob.id, is_like=True)
    db_session.commit()

    ledger.record_swipe(event.id, alice.id, carol.id, is_like=True)
    with pytest.raises(ConflictError):
        ledger.record_swipe(event.id, alice.id, bob.id, is_like=True)
    db_session.commit()

    assert ledger.has_swiped(event.id, alice.id, carol.id)


def test_find_reciprocal_only_matches_likes(db_session, event, participants) -> None:
    alice, bob, carol = participants
    ledger = SwipeLedger(db_session)
    ledger.record_swipe(event.id, bob.id, alice.id, is_like=True)
    ledger.record_swipe(event.id, carol.id, alice.id, is_like=False)
    db_session.commit()

    reciprocal = ledger.find_reciprocal(event.id, alice.id, bob.id)
    assert reciprocal is not None
    assert reciprocal.liker_id == bob.id
    assert ledger.find_reciprocal(event.id, alice.id, carol.id) is None
    assert ledger.find_reciprocal(event.id, bob.id, alice.id) is None


def test_swipes_are_scoped_to_event(db_session, event, make_event, participants, register) -> None:
    alice, bob, _ = participants
    other_event = make_event("Winter Gala")
    register(alice, other_event)
    register(bob, other_event)
    ledger = SwipeLedger(db_session)

    ledger.record_swipe(event.id, alice.id, bob.id, is_like=False)
    ledger.record_swipe(other_event.id, alice.id, bob.id, is_like=True)
    db_session.commit()

    assert db_session.query(Swipe).filter_by(liker_id=alice.id, liked_id=bob.id).count() == 2
    assert ledger.find_reciprocal(other_event.id, bob.id, alice.id) is not None
    assert ledger.find_reciprocal(event.id, bob.id, alice.id) is None


def test_delete_for_user_removes_both_directions(db_session, event, participants) -> None:
    alice, bob, carol = participants
    ledger = SwipeLedger(db_session)
    ledger.record_swipe(event.id, alice.id, bob.id, is_like=True)
    ledger.record_swipe(event.id, bob.id, alice.id, is_like=True)
    ledger.record_swipe(event.id, bob.id, carol.id, is_like=False)
    db_session.commit()

    removed = ledger.delete_for_user(event.id, alice.id)
    db_session.commit()

    assert removed == 2
    assert not ledger.has_swiped(event.id, alice.id, bob.id)
    assert not ledger.has_swiped(event.id, bob.id, alice.id)
    assert ledger.has_swiped(event.id, bob.id, carol.id)
