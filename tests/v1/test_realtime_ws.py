# mypy: ignore-errors
# tests/v1/test_realtime_ws.py
"""Tests for the websocket endpoint."""

import pytest
from fastapi import status
from starlette.websockets import WebSocketDisconnect

from eventmatch.api.v1.dependencies import get_session_factory
from eventmatch.core.security import create_access_token


def _ws_url(user) -> str:
    return f"/api/v1/ws?token={create_access_token(user.id)}"


def test_invalid_token_is_rejected(client) -> None:
    with pytest.raises(WebSocketDisconnect) as excinfo:
        with client.websocket_connect("/api/v1/ws?token=garbage"):
            pass
    assert excinfo.value.code == status.WS_1008_POLICY_VIOLATION


def test_missing_token_is_rejected(client) -> None:
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/api/v1/ws"):
            pass


def test_join_requires_match_membership(client, participants, match) -> None:
    alice, _, carol = participants

    with client.websocket_connect(_ws_url(alice)) as websocket:
        websocket.send_json({"event": "chat:join", "data": {"match_id": match.id}})
        assert websocket.receive_json() == {"event": "chat:joined", "data": {"match_id": match.id}}

    with client.websocket_connect(_ws_url(carol)) as websocket:
        websocket.send_json({"event": "chat:join", "data": {"match_id": match.id}})
        reply = websocket.receive_json()
        assert reply["event"] == "chat:error"


def test_invalid_frame_gets_error(client, alice) -> None:
    with client.websocket_connect(_ws_url(alice)) as websocket:
        websocket.send_text("not json")
        assert websocket.receive_json()["event"] == "chat:error"


def test_joined_socket_receives_new_messages(client, headers, participants, match) -> None:
    alice, bob, _ = participants

    with client.websocket_connect(_ws_url(alice)) as websocket:
        websocket.send_json({"event": "chat:join", "data": {"match_id": match.id}})
        websocket.receive_json()

        sent = client.post(
            f"/api/v1/matching/matches/{match.id}/messages",
            json={"content": "hello"},
            headers=headers(bob),
        )
        assert sent.status_code == status.HTTP_201_CREATED

        frame = websocket.receive_json()
        assert frame["event"] == "message:created"
        assert frame["data"]["match_id"] == match.id
        assert frame["data"]["sender_id"] == bob.id
        assert frame["data"]["message"]["content"] == "hello"

        update = websocket.receive_json()
        assert update["event"] == "conversation:updated"
        assert update["data"]["match_id"] == match.id


def test_typing_is_relayed_to_the_other_participant(client, participants, match) -> None:
    alice, bob, _ = participants

    with client.websocket_connect(_ws_url(alice)) as alice_ws, client.websocket_connect(_ws_url(bob)) as bob_ws:
        for websocket in (alice_ws, bob_ws):
            websocket.send_json({"event": "chat:join", "data": {"match_id": match.id}})
            websocket.receive_json()

        bob_ws.send_json({"event": "chat:typing", "data": {"match_id": match.id, "is_typing": True}})
        frame = alice_ws.receive_json()
        assert frame == {
            "event": "chat:typing",
            "data": {"match_id": match.id, "user_id": bob.id, "is_typing": True},
        }

        alice_ws.send_json({"event": "chat:markRead", "data": {"match_id": match.id, "message_id": 3}})
        frame = bob_ws.receive_json()
        assert frame == {
            "event": "chat:messageRead",
            "data": {"match_id": match.id, "message_id": 3, "read_by": alice.id},
        }


def test_idle_socket_holds_no_open_transaction(client, app, session_factory, participants, match) -> None:
    alice, _, _ = participants
    opened = []

    def tracking_factory():
        session = session_factory()
        opened.append(session)
        return session

    app.dependency_overrides[get_session_factory] = lambda: tracking_factory

    with client.websocket_connect(_ws_url(alice)) as websocket:
        websocket.send_json({"event": "chat:join", "data": {"match_id": match.id}})
        assert websocket.receive_json()["event"] == "chat:joined"
        websocket.send_json({"event": "chat:typing", "data": {"match_id": match.id}})
        websocket.send_json({"event": "chat:join", "data": {"match_id": match.id}})
        assert websocket.receive_json()["event"] == "chat:joined"

        assert len(opened) >= 3
        assert [session.in_transaction() for session in opened] == [False] * len(opened)
