# src/eventmatch/schemas/conversation.py
"""Conversation view schemas."""

from datetime import datetime

from pydantic import BaseModel

from .message import MessageResponse
from .profile import ProfileSummary


class LastMessage(BaseModel):
    """Preview of the most recent message of a conversation."""

    content: str
    sent_at: datetime
    is_mine: bool


class ConversationSummary(BaseModel):
    """Entry of a conversation list."""

    match_id: int
    is_archived: bool
    is_event_expired: bool
    is_blocked: bool
    is_other_user_blocked: bool
    user: ProfileSummary
    last_message: LastMessage | None
    unread_count: int


class ConversationEvent(BaseModel):
    """Event header of a conversation group."""

    id: int
    name: str
    is_expired: bool
    is_blocked: bool


class EventConversations(BaseModel):
    """Conversations of a user inside one event."""

    event: ConversationEvent
    conversations: list[ConversationSummary]


class ConversationHeader(BaseModel):
    """Match details shown above a message thread."""

    id: int
    event_id: int
    event_name: str
    user: ProfileSummary
    is_blocked: bool
    is_other_user_blocked: bool
    is_archived: bool
    is_event_expired: bool
    status: str


class ConversationThread(BaseModel):
    """A page of messages with its conversation header."""

    match: ConversationHeader
    messages: list[MessageResponse]
