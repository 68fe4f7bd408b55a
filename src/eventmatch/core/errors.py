# src/eventmatch/core/errors.py
"""Domain exceptions raised by the matching and conversation engine.

Services and repositories raise these instead of ``HTTPException`` so they stay
usable outside a request. The API layer maps them to JSON responses through
:func:`install_error_handlers`.
"""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


class MatchingError(RuntimeError):
    """Base exception for every failure surfaced by the engine."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str | None = None
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(MatchingError):
    """Client-correctable input problem (missing id, empty content...)."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class NotFoundError(MatchingError):
    """Event, match, message or target user does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Not found"


class ForbiddenError(MatchingError):
    """Caller is not allowed to perform the action."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    default_message = "Forbidden"


class ConflictError(MatchingError):
    """The action would duplicate an existing record."""

    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    default_message = "Conflict"


class EventExpiredError(ForbiddenError):
    """The event application window has ended."""

    code = "EVENT_EXPIRED"
    default_message = "The application window of this event has ended"


class UserBlockedError(ForbiddenError):
    """The caller has been blocked from the event by its organiser."""

    code = "USER_BLOCKED"
    default_message = "You have been blocked from this event by the organiser"


def install_error_handlers(app: FastAPI) -> None:
    """Register the JSON translation of :class:`MatchingError` on ``app``."""

    @app.exception_handler(MatchingError)
    async def matching_error_handler(request: Request, exc: MatchingError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "code": exc.code},
        )


__all__ = [
    "ConflictError",
    "EventExpiredError",
    "ForbiddenError",
    "MatchingError",
    "NotFoundError",
    "UserBlockedError",
    "ValidationError",
    "install_error_handlers",
]
