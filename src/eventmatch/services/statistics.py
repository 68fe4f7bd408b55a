# src/eventmatch/services/statistics.py
"""Read-side aggregates over the swipe, match and message tables."""

from __future__ import annotations

import math

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from eventmatch.models import EventRegistration, Match, Message, Swipe
from eventmatch.schemas import (
    EventStatistics,
    MatchingStats,
    MessageStats,
    ParticipantStats,
    SwipeStats,
)

from .membership import get_event


def _percent(part: int, whole: int) -> int:
    """Return ``part / whole`` as a percentage rounded half up, 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return math.floor(part * 100 / whole + 0.5)


def _average(total: int, count: int) -> float:
    """Return ``total / count`` rounded half up to one decimal, 0 when ``count`` is 0."""
    if count <= 0:
        return 0.0
    return math.floor(total * 10 / count + 0.5) / 10


def matching_statistics(db: Session, event_id: int) -> EventStatistics:
    """Compute engagement statistics for an event.

    The reciprocity rate is ``2 * matches / likes``: each match consumed
    exactly two likes.

    Raises:
        NotFoundError: If the event does not exist.
    """
    get_event(db, event_id)

    participants = db.execute(
        select(func.count()).select_from(EventRegistration).where(EventRegistration.event_id == event_id)
    ).scalar_one()
    total_matches = db.execute(
        select(func.count(Match.id)).where(Match.event_id == event_id)
    ).scalar_one()

    total_swipes, likes, users_who_swiped = db.execute(
        select(
            func.count(Swipe.id),
            func.coalesce(func.sum(case((Swipe.is_like.is_(True), 1), else_=0)), 0),
            func.count(func.distinct(Swipe.liker_id)),
        ).where(Swipe.event_id == event_id)
    ).one()

    total_messages, users_who_sent, conversations_active = db.execute(
        select(
            func.count(Message.id),
            func.count(func.distinct(Message.sender_id)),
            func.count(func.distinct(Message.match_id)),
        )
        .join(Match, Match.id == Message.match_id)
        .where(Match.event_id == event_id)
    ).one()

    swipers = set(
        db.execute(select(Swipe.liker_id).where(Swipe.event_id == event_id).distinct()).scalars()
    )
    senders = set(
        db.execute(
            select(Message.sender_id)
            .join(Match, Match.id == Message.match_id)
            .where(Match.event_id == event_id)
            .distinct()
        ).scalars()
    )
    active = len(swipers | senders)
    likes = int(likes)

    return EventStatistics(
        event_id=event_id,
        participants=ParticipantStats(
            total=participants,
            active=active,
            engagement_rate=_percent(active, participants),
        ),
        matching=MatchingStats(
            total_matches=total_matches,
            average_matches_per_user=_average(total_matches * 2, participants),
            reciprocity_rate=_percent(total_matches * 2, likes),
        ),
        swipes=SwipeStats(
            total=total_swipes,
            likes=likes,
            passes=total_swipes - likes,
            users_who_swiped=users_who_swiped,
            like_rate=_percent(likes, total_swipes),
        ),
        messages=MessageStats(
            total=total_messages,
            users_who_sent=users_who_sent,
            conversations_active=conversations_active,
            average_per_conversation=_average(total_messages, total_matches),
        ),
    )
