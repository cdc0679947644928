"""Live channel tests against the real app with an in-memory UoW."""
from __future__ import annotations

import jwt
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from realtime_service.api.deps import get_uow
from realtime_service.app import create_app
from realtime_service.config import settings
from tests.conftest import FakeUoW


def _token(sub: str, name: str | None = None, roles: list | None = None) -> str:
    return jwt.encode(
        {"sub": sub, "name": name or sub.title(), "roles": roles or []},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def _next(ws) -> dict:
    """Next frame that is not a presence broadcast."""
    while True:
        frame = ws.receive_json()
        if frame["type"] != "get_users":
            return frame


def _assert_quiet(ws) -> None:
    ws.send_json({"type": "ping", "data": {}})
    assert _next(ws)["type"] == "pong"


@pytest.fixture
def client():
    app = create_app()
    uow = FakeUoW()

    async def _override():
        yield uow

    app.dependency_overrides[get_uow] = _override
    with TestClient(app) as test_client:
        yield test_client


def _connect(client: TestClient, sub: str):
    return client.websocket_connect(f"/ws?token={_token(sub)}")


def test_rejects_bad_token(client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/ws?token=garbage") as ws:
            ws.receive_json()
    assert exc_info.value.code == 4001


def test_presence_list_follows_connections(client):
    with _connect(client, "alice") as alice:
        assert alice.receive_json() == {"type": "get_users", "data": [{"userId": "alice"}]}
        with _connect(client, "bob") as bob:
            users = bob.receive_json()
            assert users["type"] == "get_users"
            assert [u["userId"] for u in users["data"]] == ["alice", "bob"]
            assert [u["userId"] for u in alice.receive_json()["data"]] == ["alice", "bob"]
        assert alice.receive_json() == {"type": "get_users", "data": [{"userId": "alice"}]}


def test_message_reaches_recipient_once_without_echo(client):
    with _connect(client, "alice") as tab1, _connect(client, "alice") as tab2, _connect(client, "bob") as bob:
        tab1.send_json({
            "type": "send_message",
            "data": {
                "senderId": "alice",
                "receiverId": "bob",
                "conversationId": "conv-1",
                "text": "Hi B",
                "tempId": "t-1",
                "clientMsgId": "c-1",
            },
        })

        ack = _next(tab1)
        assert ack == {"type": "message_sent", "data": {"tempId": "t-1", "clientMsgId": "c-1", "messageId": None}}

        received = _next(bob)
        assert received["type"] == "get_message"
        assert received["data"]["text"] == "Hi B"
        assert received["data"]["conversation"] == "conv-1"
        assert received["data"]["sender"] == {"_id": "alice", "name": "Alice", "avatar": None}
        assert received["data"]["clientMsgId"] == "c-1"

        _assert_quiet(bob)
        _assert_quiet(tab2)


def test_spoofed_sender_is_replaced_by_connected_user(client):
    with _connect(client, "mallory") as mallory, _connect(client, "bob") as bob:
        mallory.send_json({
            "type": "send_message",
            "data": {"senderId": "alice", "receiverId": "bob", "conversationId": "c", "text": "hey"},
        })
        _next(mallory)

        assert _next(bob)["data"]["sender"]["_id"] == "mallory"


def test_typing_relay_and_stop_on_disconnect(client):
    with _connect(client, "bob") as bob:
        with _connect(client, "alice") as alice:
            alice.send_json({"type": "typing_start", "data": {"userId": "alice", "targetUserId": "bob"}})
            alice.send_json({"type": "typing_start", "data": {"userId": "alice", "targetUserId": "alice"}})

            assert _next(bob) == {"type": "user_typing", "data": {"userId": "alice", "isTyping": True}}
            _assert_quiet(alice)

        assert _next(bob) == {"type": "user_typing", "data": {"userId": "alice", "isTyping": False}}


def test_remove_notification_syncs_other_devices(client):
    with _connect(client, "alice") as phone, _connect(client, "alice") as laptop:
        phone.send_json({"type": "remove_notification", "data": {"notificationId": "n-1", "userId": "alice"}})

        assert _next(laptop) == {"type": "notification_removed", "data": {"notificationId": "n-1"}}
        _assert_quiet(phone)


def test_invalid_frames_get_error_replies(client):
    with _connect(client, "alice") as ws:
        ws.send_text("{not json")
        assert _next(ws)["data"]["code"] == "invalid_payload"

        ws.send_json({"type": "join_room", "data": {}})
        error = _next(ws)
        assert error["type"] == "error"
        assert error["data"]["code"] == "unknown_type"
        assert error["data"]["type"] == "join_room"


def test_internal_event_is_pushed_to_recipient(client):
    with _connect(client, "bob") as bob:
        resp = client.post(
            "/api/v1/internal/notifications",
            headers={"Authorization": f"Bearer {_token('bookings-svc', roles=['service'])}"},
            json={
                "event": "booking_status_changed",
                "customerId": "bob",
                "bookingId": "bk-1",
                "status": "accepted",
                "serviceId": "svc-1",
                "serviceTitle": "Garden cleanup",
            },
        )
        assert resp.status_code == 202

        frame = _next(bob)
        assert frame["type"] == "booking_status_notification"
        assert frame["data"]["type"] == "booking_accepted"
        assert frame["data"]["service"] == {"_id": "svc-1", "title": "Garden cleanup"}
        assert frame["data"]["notificationId"] == resp.json()["notificationId"]
