# src/eventmatch/schemas/message.py
"""Message-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MessageCreate(BaseModel):
    """Schema for sending a message on a match.

    Content rules (non-empty after trimming, bounded length) are enforced by the
    conversation service so violations surface as validation errors with a code.
    """

    content: str | None = Field(None, description="Plain-text message body")


class MessageResponse(BaseModel):
    """Schema for message information returned by the API."""

    id: int
    match_id: int
    sender_id: int
    content: str
    sent_at: datetime
    is_read: bool
    is_liked: bool

    model_config = ConfigDict(from_attributes=True)


class ReadReceipt(BaseModel):
    """Result of marking a message as read."""

    is_read: bool


class LikeToggle(BaseModel):
    """Result of toggling the like reaction on a message."""

    is_liked: bool
