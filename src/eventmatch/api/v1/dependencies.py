# src/eventmatch/api/v1/dependencies.py
"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session, sessionmaker

from eventmatch.core.security import decode_user_id
from eventmatch.core.settings import settings
from eventmatch.db.session import SessionLocal, get_db
from eventmatch.models import User
from eventmatch.realtime import ConnectionManager, manager
from eventmatch.services import RealtimeNotifier, get_notifier

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer token credentials
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        HTTPException: If token is invalid or user not found
    """
    user_id = decode_user_id(credentials.credentials)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def get_session_factory() -> sessionmaker[Session]:
    """Return the factory used by long-lived connections to open short sessions."""
    return SessionLocal


def get_notifier_dep() -> RealtimeNotifier:
    """Return the shared realtime notifier."""
    return get_notifier()


def get_connection_manager() -> ConnectionManager:
    """Return the process-wide websocket connection manager."""
    return manager


def clamp_limit(limit: int | None, default: int | None = None) -> int:
    """Bound a requested page size to ``[1, LIST_MAX_LIMIT]``."""
    if limit is None:
        return default if default is not None else settings.list_default_limit
    return max(1, min(limit, settings.list_max_limit))


def clamp_offset(offset: int | None) -> int:
    return max(0, offset or 0)


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
NotifierDep = Annotated[RealtimeNotifier, Depends(get_notifier_dep)]
ConnectionManagerDep = Annotated[ConnectionManager, Depends(get_connection_manager)]
SessionFactoryDep = Annotated[sessionmaker[Session], Depends(get_session_factory)]
