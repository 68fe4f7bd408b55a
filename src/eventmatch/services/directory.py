# src/eventmatch/services/directory.py
"""Profile lookups used to display swipe candidates and match counterparts."""

from __future__ import annotations

from sqlalchemy import exists, func, select
from sqlalchemy.orm import Session

from eventmatch.core.errors import NotFoundError
from eventmatch.models import EventBlockedUser, EventRegistration, Photo, Swipe, User
from eventmatch.schemas import CandidateProfile, PhotoOut, ProfileSummary


class ProfileDirectory:
    """Resolves user ids to display data, scoped to an event when one is given."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def photos(self, user_id: int, event_id: int | None = None) -> list[PhotoOut]:
        """Return the photos to show for ``user_id``.

        Event-specific photos take priority; without any, the general set
        (photos with no event) is returned. Primary photo first.
        """
        ordering = (Photo.is_primary.desc(), Photo.display_order, Photo.id)
        if event_id is not None:
            scoped = self.session.execute(
                select(Photo)
                .where(Photo.user_id == user_id, Photo.event_id == event_id)
                .order_by(*ordering)
            ).scalars().all()
            if scoped:
                return [PhotoOut.model_validate(photo) for photo in scoped]
        general = self.session.execute(
            select(Photo)
            .where(Photo.user_id == user_id, Photo.event_id.is_(None))
            .order_by(*ordering)
        ).scalars().all()
        return [PhotoOut.model_validate(photo) for photo in general]

    def get_profile_summary(self, user_id: int, event_id: int | None = None) -> ProfileSummary:
        """Return ``{id, firstname, lastname, photos}`` for a user.

        Raises:
            NotFoundError: If the user does not exist.
        """
        user = self.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return ProfileSummary(
            id=user.id,
            firstname=user.firstname,
            lastname=user.lastname,
            photos=self.photos(user.id, event_id),
        )

    def get_match_profile(self, user_id: int, event_id: int) -> CandidateProfile:
        """Return the full event profile of a user: summary, birthday and event answers."""
        row = self.session.execute(
            select(User, EventRegistration.profile_info)
            .outerjoin(
                EventRegistration,
                (EventRegistration.user_id == User.id) & (EventRegistration.event_id == event_id),
            )
            .where(User.id == user_id)
        ).first()
        if row is None:
            raise NotFoundError("Profile not found")
        user, profile_info = row
        return CandidateProfile(
            user_id=user.id,
            firstname=user.firstname,
            lastname=user.lastname,
            birthday=user.birthday,
            profile_info=profile_info,
            photos=self.photos(user.id, event_id),
        )

    def candidates(self, event_id: int, user_id: int, limit: int) -> list[CandidateProfile]:
        """Return up to ``limit`` registered users not yet evaluated by ``user_id``.

        Excludes the caller, anyone the caller already swiped and users blocked
        in the event. Order is random.
        """
        already_swiped = exists().where(
            Swipe.event_id == event_id,
            Swipe.liker_id == user_id,
            Swipe.liked_id == User.id,
        )
        blocked = exists().where(
            EventBlockedUser.event_id == event_id,
            EventBlockedUser.user_id == User.id,
        )
        stmt = (
            select(User, EventRegistration.profile_info)
            .join(EventRegistration, EventRegistration.user_id == User.id)
            .where(
                EventRegistration.event_id == event_id,
                User.id != user_id,
                ~already_swiped,
                ~blocked,
            )
            .order_by(func.random())
            .limit(limit)
        )
        return [
            CandidateProfile(
                user_id=user.id,
                firstname=user.firstname,
                lastname=user.lastname,
                birthday=user.birthday,
                profile_info=profile_info,
                photos=self.photos(user.id, event_id),
            )
            for user, profile_info in self.session.execute(stmt).all()
        ]
