# src/eventmatch/schemas/profile.py
"""Profile-related Pydantic schemas."""

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PhotoOut(BaseModel):
    """Photo reference returned with a profile."""

    id: int
    file_path: str

    model_config = ConfigDict(from_attributes=True)


class ProfileSummary(BaseModel):
    """Display data of a user as seen by a counterpart."""

    id: int
    firstname: str
    lastname: str = ""
    photos: list[PhotoOut] = Field(default_factory=list)


class CandidateProfile(BaseModel):
    """Profile offered to a swiper, or shown when opening a match."""

    user_id: int
    firstname: str
    lastname: str
    birthday: date | None = None
    profile_info: dict[str, Any] | None = None
    photos: list[PhotoOut] = Field(default_factory=list)
