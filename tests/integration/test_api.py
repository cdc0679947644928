"""Integration tests for the REST API (in-memory UoW via dependency override)."""
from __future__ import annotations

import uuid

import jwt
import pytest
from fastapi.testclient import TestClient

from realtime_service.api.deps import get_uow
from realtime_service.app import create_app
from realtime_service.config import settings
from tests.conftest import FakeUoW, make_conversation


def _make_token(sub: str = "alice", name: str | None = "Alice", roles: list | None = None) -> str:
    return jwt.encode(
        {"sub": sub, "name": name, "roles": roles or []},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def _auth(sub: str = "alice", **claims) -> dict[str, str]:
    return {"Authorization": f"Bearer {_make_token(sub, **claims)}"}


@pytest.fixture
def app_with_uow():
    app = create_app()
    uow = FakeUoW()

    async def _override():
        yield uow

    app.dependency_overrides[get_uow] = _override
    return app, uow


@pytest.fixture
def client(app_with_uow):
    app, _ = app_with_uow
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def uow(app_with_uow):
    _, uow = app_with_uow
    return uow


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.headers["X-Request-ID"]


def test_create_conversation_is_idempotent(client, uow):
    first = client.post("/api/v1/chat/conversations", headers=_auth("alice"), json={"receiverId": "bob"})
    second = client.post("/api/v1/chat/conversations", headers=_auth("bob"), json={"receiverId": "alice"})

    assert first.status_code == 201
    assert second.status_code == 200
    assert first.json()["id"] == second.json()["id"]
    assert first.json()["members"] == ["alice", "bob"]


def test_create_self_conversation_rejected(client):
    resp = client.post("/api/v1/chat/conversations", headers=_auth("alice"), json={"receiverId": "alice"})
    assert resp.status_code == 422


def test_list_conversations_empty(client):
    resp = client.get("/api/v1/chat/conversations", headers=_auth())
    assert resp.status_code == 200
    assert resp.json() == []


def test_get_conversation_forbidden_for_outsider(client, uow):
    conv = uow.add_conversation(make_conversation("alice", "bob"))

    resp = client.get(f"/api/v1/chat/conversations/{conv.id}", headers=_auth("mallory"))

    assert resp.status_code == 403


def test_send_and_list_messages(client, uow):
    conv = uow.add_conversation(make_conversation("alice", "bob"))
    client_msg_id = str(uuid.uuid4())

    resp = client.post(
        f"/api/v1/chat/conversations/{conv.id}/messages",
        headers=_auth("alice"),
        json={"clientMsgId": client_msg_id, "type": "text", "text": "hello world"},
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["text"] == "hello world"
    assert data["senderId"] == "alice"
    assert data["clientMsgId"] == client_msg_id

    retry = client.post(
        f"/api/v1/chat/conversations/{conv.id}/messages",
        headers=_auth("alice"),
        json={"clientMsgId": client_msg_id, "type": "text", "text": "hello world"},
    )
    assert retry.json()["id"] == data["id"]

    history = client.get(f"/api/v1/chat/conversations/{conv.id}/messages", headers=_auth("bob"))
    assert history.status_code == 200
    assert [m["id"] for m in history.json()] == [data["id"]]

    listing = client.get("/api/v1/chat/conversations", headers=_auth("bob"))
    assert listing.json()[0]["latestMessageText"] == "hello world"


def test_friend_request_pending_count(client):
    headers = _auth("bob")

    assert client.get("/api/v1/friends/requests/pending-count", headers=headers).json() == {"pendingCount": 0}
    assert client.post("/api/v1/friends/requests/pending-count", headers=headers).json() == {"pendingCount": 1}
    assert client.delete("/api/v1/friends/requests/pending-count", headers=headers).status_code == 204
    assert client.get("/api/v1/friends/requests/pending-count", headers=headers).json() == {"pendingCount": 0}


def test_internal_notification_requires_service_role(client):
    resp = client.post(
        "/api/v1/internal/notifications",
        headers=_auth("alice"),
        json={
            "event": "friend_request_sent",
            "recipientId": "bob",
            "requestId": "req-1",
            "requester": {"id": "alice", "name": "Alice"},
        },
    )
    assert resp.status_code == 403


def test_internal_friend_request_increments_counter(client, uow):
    resp = client.post(
        "/api/v1/internal/notifications",
        headers=_auth("friends-svc", roles=["service"]),
        json={
            "event": "friend_request_sent",
            "recipientId": "bob",
            "requestId": "req-1",
            "requester": {"id": "alice", "name": "Alice"},
        },
    )

    assert resp.status_code == 202
    assert resp.json()["notificationId"]
    assert uow.friend_requests._counts["bob"] == 1


def test_internal_pending_booking_status_rejected(client):
    resp = client.post(
        "/api/v1/internal/notifications",
        headers=_auth("bookings-svc", roles=["service"]),
        json={
            "event": "booking_status_changed",
            "customerId": "alice",
            "bookingId": "bk-1",
            "status": "pending",
        },
    )
    assert resp.status_code == 422


def test_unauthorized_returns_error(client):
    resp = client.get("/api/v1/chat/conversations")
    assert resp.status_code in (401, 403)


def test_invalid_token_returns_401(client):
    resp = client.get("/api/v1/chat/conversations", headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 401


def test_request_id_is_echoed(client):
    resp = client.get("/healthz", headers={"X-Request-ID": "trace-123"})
    assert resp.headers["X-Request-ID"] == "trace-123"
