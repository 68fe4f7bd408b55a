# src/eventmatch/api/v1/endpoints/swipes.py
"""Swipe endpoints: candidate browsing, like and pass."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from eventmatch.core.settings import settings
from eventmatch.schemas import CandidateProfile, LikeResponse, PassResponse, SwipeRequest
from eventmatch.services import MatchingService

from ..dependencies import CurrentUserDep, NotifierDep, SessionDep

router = APIRouter(prefix="/events", tags=["swipes"])


@router.get("/{event_id}/profiles", response_model=list[CandidateProfile])
async def list_profiles(
    event_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    notifier: NotifierDep,
    limit: int | None = Query(None, description="Maximum number of candidates"),
) -> list[CandidateProfile]:
    """Return participants the caller has not swiped yet, in random order."""
    if limit is None:
        limit = settings.swipe_candidates_default_limit
    limit = max(1, min(limit, settings.swipe_candidates_max_limit))
    return MatchingService(db, notifier).get_profiles(event_id, current_user.id, limit)


@router.post("/{event_id}/like", response_model=LikeResponse, status_code=status.HTTP_200_OK)
async def like_profile(
    event_id: int,
    payload: SwipeRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
    notifier: NotifierDep,
) -> LikeResponse:
    """Like a participant; the response says whether the like completed a match."""
    service = MatchingService(db, notifier)
    return await service.like_profile(event_id, current_user.id, payload.user_id)


@router.post("/{event_id}/pass", response_model=PassResponse, status_code=status.HTTP_200_OK)
async def pass_profile(
    event_id: int,
    payload: SwipeRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
    notifier: NotifierDep,
) -> PassResponse:
    service = MatchingService(db, notifier)
    return await service.pass_profile(event_id, current_user.id, payload.user_id)
