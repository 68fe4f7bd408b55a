# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import timedelta
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from eventmatch.api.v1.dependencies import (
    get_connection_manager,
    get_notifier_dep,
    get_session_factory,
)
from eventmatch.core.security import create_access_token
from eventmatch.db.session import Base, configure_sqlite
from eventmatch.db.session import get_db as app_get_session
from eventmatch.db.time import utcnow
from eventmatch.main import app as fastapi_app
from eventmatch.models import (
    Event,
    EventBlockedUser,
    EventRegistration,
    Match,
    Message,
    Photo,
    User,
)
from eventmatch.realtime import ConnectionManager
from eventmatch.repositories import canonical_pair
from eventmatch.services import RealtimeNotifier

TEST_DB_URL = "sqlite://"


class RecordingNotifier(RealtimeNotifier):
    """Notifier that keeps every emission for assertions, then delivers it."""

    def __init__(self, connections: ConnectionManager) -> None:
        super().__init__(connections)
        self.emitted: list[tuple[str, str, dict[str, Any]]] = []

    async def emit(self, room: str, event: str, data: dict[str, Any]) -> None:
        self.emitted.append((room, event, data))
        await super().emit(room, event, data)

    def events(self, name: str) -> list[tuple[str, dict[str, Any]]]:
        return [(room, data) for room, event, data in self.emitted if event == name]


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def connections() -> ConnectionManager:
    """A connection manager private to the test."""
    return ConnectionManager()


@pytest.fixture()
def notifier(connections: ConnectionManager) -> RecordingNotifier:
    return RecordingNotifier(connections)


@pytest.fixture(autouse=True)
def override_realtime_dependencies(
    app: FastAPI,
    connections: ConnectionManager,
    notifier: RecordingNotifier,
    session_factory: sessionmaker[Session],
) -> Iterator[None]:
    app.dependency_overrides[get_notifier_dep] = lambda: notifier
    app.dependency_overrides[get_connection_manager] = lambda: connections
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_notifier_dep, None)
        app.dependency_overrides.pop(get_connection_manager, None)
        app.dependency_overrides.pop(get_session_factory, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory persisting users."""

    def _make(firstname: str, lastname: str = "Doe") -> User:
        user = User(firstname=firstname, lastname=lastname)
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture()
def make_event(db_session: Session) -> Callable[..., Event]:
    """Return a factory persisting events; ``ends_in`` may be negative for expired events."""

    def _make(name: str = "Summer Party", ends_in: timedelta | None = timedelta(days=1)) -> Event:
        now = utcnow()
        event = Event(
            name=name,
            app_start_at=now - timedelta(days=1),
            app_end_at=None if ends_in is None else now + ends_in,
        )
        db_session.add(event)
        db_session.commit()
        return event

    return _make


@pytest.fixture()
def register(db_session: Session) -> Callable[..., EventRegistration]:
    def _register(user: User, event: Event, profile_info: dict[str, Any] | None = None) -> EventRegistration:
        registration = EventRegistration(
            user_id=user.id,
            event_id=event.id,
            profile_info=profile_info or {"bio": f"Hi, I am {user.firstname}"},
        )
        db_session.add(registration)
        db_session.commit()
        return registration

    return _register


@pytest.fixture()
def block(db_session: Session) -> Callable[..., EventBlockedUser]:
    """Insert a block row directly, bypassing match archival."""

    def _block(user: User, event: Event) -> EventBlockedUser:
        entry = EventBlockedUser(event_id=event.id, user_id=user.id, reason="test")
        db_session.add(entry)
        db_session.commit()
        return entry

    return _block


@pytest.fixture()
def event(make_event: Callable[..., Event]) -> Event:
    """An event whose application window is open."""
    return make_event()


@pytest.fixture()
def alice(make_user: Callable[..., User]) -> User:
    return make_user("Alice", "Martin")


@pytest.fixture()
def bob(make_user: Callable[..., User]) -> User:
    return make_user("Bob", "Durand")


@pytest.fixture()
def carol(make_user: Callable[..., User]) -> User:
    return make_user("Carol", "Petit")


@pytest.fixture()
def participants(
    event: Event,
    alice: User,
    bob: User,
    carol: User,
    register: Callable[..., EventRegistration],
) -> tuple[User, User, User]:
    """Alice, Bob and Carol registered for ``event``."""
    for user in (alice, bob, carol):
        register(user, event)
    return alice, bob, carol


@pytest.fixture()
def make_match(db_session: Session) -> Callable[..., Match]:
    """Insert a match row directly in canonical order."""

    def _make(event: Event, user_a: User, user_b: User, archived: bool = False) -> Match:
        low, high = canonical_pair(user_a.id, user_b.id)
        match = Match(event_id=event.id, user_low_id=low, user_high_id=high, is_archived=archived)
        db_session.add(match)
        db_session.commit()
        return match

    return _make


@pytest.fixture()
def match(participants: tuple[User, User, User], event: Event, make_match: Callable[..., Match]) -> Match:
    """A match between Alice and Bob in ``event``."""
    alice, bob, _ = participants
    return make_match(event, alice, bob)


@pytest.fixture()
def make_message(db_session: Session) -> Callable[..., Message]:
    def _make(match: Match, sender: User, content: str = "hello") -> Message:
        message = Message(match_id=match.id, sender_id=sender.id, content=content)
        db_session.add(message)
        db_session.commit()
        return message

    return _make


@pytest.fixture()
def photo(db_session: Session) -> Callable[..., Photo]:
    def _photo(
        user: User,
        file_path: str,
        event: Event | None = None,
        is_primary: bool = False,
        display_order: int = 0,
    ) -> Photo:
        entry = Photo(
            user_id=user.id,
            event_id=event.id if event is not None else None,
            file_path=file_path,
            is_primary=is_primary,
            display_order=display_order,
        )
        db_session.add(entry)
        db_session.commit()
        return entry

    return _photo


def auth_headers(user: User) -> dict[str, str]:
    """Return authorization headers for ``user``."""
    token = create_access_token(user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers() -> Callable[[User], dict[str, str]]:
    return auth_headers
