"""Shared test fixtures."""
from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest

from realtime_service.application.dto.principal import Principal
from realtime_service.domain.entities.connection import Connection
from realtime_service.domain.entities.conversation import Conversation, ordered_pair
from realtime_service.domain.entities.message import Message
from realtime_service.domain.value_objects.enums import MessageType
from realtime_service.infrastructure.ws.protocol import decode_outbound


@pytest.fixture
def alice() -> Principal:
    return Principal(user_id="alice", name="Alice", avatar="https://cdn.example/alice.png")


@pytest.fixture
def bob() -> Principal:
    return Principal(user_id="bob", name="Bob")


@pytest.fixture
def service_principal() -> Principal:
    return Principal(user_id="bookings-svc", roles=["service"])


def make_conversation(
    user_a: str = "alice",
    user_b: str = "bob",
    *,
    conversation_id: UUID | None = None,
    updated_at: datetime | None = None,
) -> Conversation:
    now = updated_at or datetime.now(timezone.utc)
    low, high = ordered_pair(user_a, user_b)
    return Conversation(
        id=conversation_id or uuid.uuid4(),
        member_low=low,
        member_high=high,
        latest_message_id=None,
        latest_message_text=None,
        last_message_at=None,
        created_at=now,
        updated_at=now,
    )


def make_message(
    *,
    conversation_id: UUID | None = None,
    sender_id: str = "alice",
    text: str = "hello",
    created_at: datetime | None = None,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id or uuid.uuid4(),
        sender_id=sender_id,
        type=MessageType.TEXT.value,
        text=text,
        file_url=None,
        file_name=None,
        file_type=None,
        client_msg_id=uuid.uuid4(),
        created_at=created_at or datetime.now(timezone.utc),
    )


class FakeTransport:
    """Collects raw frames written to a connection."""

    def __init__(self, *, fail: bool = False) -> None:
        self.sent: list[str] = []
        self.fail = fail

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise ConnectionResetError("transport gone")
        self.sent.append(data)

    def frames(self, frame_type: str | None = None) -> list:
        decoded = [decode_outbound(raw) for raw in self.sent]
        if frame_type is None:
            return decoded
        return [f for f in decoded if f.type == frame_type]


def make_connection(user_id: str, *, fail: bool = False) -> Connection:
    return Connection(user_id=user_id, transport=FakeTransport(fail=fail))


class RecordingDelivery:
    """LiveDelivery that records calls instead of writing to sockets."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, object, str | None]] = []
        self.broadcasts: list[object] = []

    async def send_to_user(self, user_id: str, frame, *, exclude: str | None = None) -> int:
        self.sent.append((user_id, frame, exclude))
        return 1

    async def broadcast(self, frame) -> int:
        self.broadcasts.append(frame)
        return 0

    def frames_for(self, user_id: str) -> list:
        return [frame for uid, frame, _ in self.sent if uid == user_id]


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self._mono = start
        self._wall = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def advance(self, seconds: float) -> None:
        self._mono += seconds
        self._wall += timedelta(seconds=seconds)

    def monotonic(self) -> float:
        return self._mono

    def now(self) -> datetime:
        return self._wall


@dataclass
class FakeConversationReader:
    _store: dict[UUID, Conversation] = field(default_factory=dict)

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        return self._store.get(conversation_id)

    async def get_by_members(self, member_low: str, member_high: str) -> Conversation | None:
        for c in self._store.values():
            if c.member_low == member_low and c.member_high == member_high:
                return c
        return None

    async def list_for_user(self, user_id: str, *, cursor: str | None = None, limit: int = 20) -> list[Conversation]:
        convs = [c for c in self._store.values() if c.has_member(user_id)]
        convs.sort(key=lambda c: c.updated_at, reverse=True)
        return convs[:limit]


@dataclass
class FakeConversationWriter:
    _reader: FakeConversationReader

    async def create_if_not_exists(self, conversation: Conversation) -> tuple[Conversation, bool]:
        existing = await self._reader.get_by_members(conversation.member_low, conversation.member_high)
        if existing is not None:
            return existing, False
        self._reader._store[conversation.id] = conversation
        return conversation, True

    async def touch_latest_message(
        self,
        conversation_id: UUID,
        message_id: UUID,
        text: str | None,
        ts: datetime,
    ) -> None:
        conv = self._reader._store[conversation_id]
        self._reader._store[conversation_id] = dataclasses.replace(
            conv,
            latest_message_id=message_id,
            latest_message_text=text,
            last_message_at=ts,
            updated_at=ts,
        )


@dataclass
class FakeMessageReader:
    _messages: list[Message] = field(default_factory=list)

    async def list_messages(self, conversation_id: UUID, *, cursor: str | None = None, limit: int = 50) -> list[Message]:
        msgs = [m for m in self._messages if m.conversation_id == conversation_id]
        msgs.sort(key=lambda m: (m.created_at, m.id))
        return msgs[:limit]


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader

    async def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        existing = await self.get_by_client_msg_id(
            message.conversation_id, message.sender_id, message.client_msg_id,
        )
        if existing is not None:
            return existing, False
        self._reader._messages.append(message)
        return message, True

    async def get_by_client_msg_id(self, conversation_id: UUID, sender_id: str, client_msg_id: UUID) -> Message | None:
        for m in self._reader._messages:
            if (
                m.conversation_id == conversation_id
                and m.sender_id == sender_id
                and m.client_msg_id == client_msg_id
            ):
                return m
        return None


@dataclass
class FakeFriendRequestCounter:
    _counts: dict[str, int] = field(default_factory=dict)

    async def get(self, user_id: str) -> int:
        return self._counts.get(user_id, 0)

    async def increment(self, user_id: str, by: int = 1) -> int:
        self._counts[user_id] = self._counts.get(user_id, 0) + by
        return self._counts[user_id]

    async def reset(self, user_id: str) -> None:
        self._counts[user_id] = 0


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    conversations: FakeConversationReader = field(default_factory=FakeConversationReader)
    conversations_w: FakeConversationWriter | None = None
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    friend_requests: FakeFriendRequestCounter = field(default_factory=FakeFriendRequestCounter)
    _committed: bool = False

    def __post_init__(self) -> None:
        if self.conversations_w is None:
            self.conversations_w = FakeConversationWriter(self.conversations)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    def add_conversation(self, conversation: Conversation) -> Conversation:
        self.conversations._store[conversation.id] = conversation
        return conversation

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._committed = True

    async def rollback(self) -> None:
        pass
