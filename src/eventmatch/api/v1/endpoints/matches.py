# src/eventmatch/api/v1/endpoints/matches.py
"""Match listing and match profile endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query

from eventmatch.schemas import AllMatchesResponse, CandidateProfile, MatchListItem
from eventmatch.services import MatchingService

from ..dependencies import (
    CurrentUserDep,
    NotifierDep,
    SessionDep,
    clamp_limit,
    clamp_offset,
)

router = APIRouter(tags=["matches"])


@router.get("/events/{event_id}/matches", response_model=list[MatchListItem])
async def list_event_matches(
    event_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    notifier: NotifierDep,
    limit: int | None = Query(None),
    offset: int | None = Query(None),
) -> list[MatchListItem]:
    """Return the caller's matches in one event, newest first."""
    return MatchingService(db, notifier).list_event_matches(
        event_id, current_user.id, clamp_limit(limit), clamp_offset(offset)
    )


@router.get("/matches", response_model=AllMatchesResponse)
async def list_all_matches(
    current_user: CurrentUserDep,
    db: SessionDep,
    notifier: NotifierDep,
    limit: int | None = Query(None),
    offset: int | None = Query(None),
) -> AllMatchesResponse:
    """Return the caller's matches across every event, grouped by event."""
    return MatchingService(db, notifier).list_all_matches(
        current_user.id, clamp_limit(limit), clamp_offset(offset)
    )


@router.get("/matching/matches/{match_id}/profile", response_model=CandidateProfile)
async def get_match_profile(
    match_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    notifier: NotifierDep,
) -> CandidateProfile:
    return MatchingService(db, notifier).get_match_profile(match_id, current_user.id)
