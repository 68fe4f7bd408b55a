# src/eventmatch/api/v1/endpoints/conversations.py
"""Conversation and message endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from eventmatch.schemas import (
    ConversationThread,
    EventConversations,
    LikeToggle,
    MessageCreate,
    MessageResponse,
    ReadReceipt,
)
from eventmatch.services import ConversationService

from ..dependencies import (
    CurrentUserDep,
    NotifierDep,
    SessionDep,
    clamp_limit,
    clamp_offset,
)

router = APIRouter(prefix="/matching", tags=["conversations"])


@router.get("/conversations", response_model=list[EventConversations])
async def list_conversations(
    current_user: CurrentUserDep,
    db: SessionDep,
    notifier: NotifierDep,
    limit: int | None = Query(None),
    offset: int | None = Query(None),
) -> list[EventConversations]:
    """Return every conversation of the caller, grouped by event."""
    return ConversationService(db, notifier).list_all_conversations(
        current_user.id, clamp_limit(limit), clamp_offset(offset)
    )


@router.get("/events/{event_id}/conversations", response_model=EventConversations)
async def list_event_conversations(
    event_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    notifier: NotifierDep,
    limit: int | None = Query(None),
    offset: int | None = Query(None),
) -> EventConversations:
    return ConversationService(db, notifier).list_event_conversations(
        event_id, current_user.id, clamp_limit(limit), clamp_offset(offset)
    )


@router.get("/matches/{match_id}/messages", response_model=ConversationThread)
async def list_messages(
    match_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    notifier: NotifierDep,
    limit: int | None = Query(None),
    before: int | None = Query(None, description="Return messages older than this id"),
) -> ConversationThread:
    """Return a page of messages and mark the caller's incoming ones as read."""
    return ConversationService(db, notifier).get_messages(
        match_id, current_user.id, limit=clamp_limit(limit), before_id=before
    )


@router.post(
    "/matches/{match_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    match_id: int,
    payload: MessageCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    notifier: NotifierDep,
) -> MessageResponse:
    """Send a message on a match the caller belongs to."""
    return await ConversationService(db, notifier).send_message(
        match_id, current_user.id, payload.content
    )


@router.get("/events/{event_id}/matches/{match_id}/messages", response_model=ConversationThread)
async def list_event_messages(
    event_id: int,
    match_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    notifier: NotifierDep,
    limit: int | None = Query(None),
    before: int | None = Query(None),
) -> ConversationThread:
    return ConversationService(db, notifier).get_messages(
        match_id,
        current_user.id,
        event_id=event_id,
        limit=clamp_limit(limit),
        before_id=before,
    )


@router.post(
    "/events/{event_id}/matches/{match_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_event_message(
    event_id: int,
    match_id: int,
    payload: MessageCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    notifier: NotifierDep,
) -> MessageResponse:
    return await ConversationService(db, notifier).send_message(
        match_id, current_user.id, payload.content, event_id=event_id
    )


@router.put("/messages/{message_id}/read", response_model=ReadReceipt)
async def mark_message_read(
    message_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    notifier: NotifierDep,
) -> ReadReceipt:
    """Mark an incoming message as read."""
    return ConversationService(db, notifier).mark_message_as_read(message_id, current_user.id)


@router.put("/messages/{message_id}/like", response_model=LikeToggle)
async def toggle_message_like(
    message_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    notifier: NotifierDep,
) -> LikeToggle:
    """Flip the like reaction of a message."""
    return ConversationService(db, notifier).toggle_like(message_id, current_user.id)
