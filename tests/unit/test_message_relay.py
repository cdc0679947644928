from __future__ import annotations

from datetime import datetime, timezone

import pytest
import pytest_asyncio

from realtime_service.application.dto.relay import RelayedMessage, UserRef
from realtime_service.infrastructure.ws.manager import ConnectionManager
from realtime_service.services.message_relay import MessageRelay
from realtime_service.services.presence_registry import PresenceRegistry
from tests.conftest import make_connection


def _message(text: str = "Hi B") -> RelayedMessage:
    return RelayedMessage(
        conversation_id="conv-1",
        sender=UserRef(id="alice", name="Alice"),
        text=text,
        created_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
        client_msg_id="c-1",
    )


@pytest_asyncio.fixture
async def wired():
    manager = ConnectionManager(PresenceRegistry(), broadcast_presence=False)
    conns = {
        "a1": make_connection("alice"),
        "a2": make_connection("alice"),
        "b1": make_connection("bob"),
    }
    for conn in conns.values():
        await manager.connect(conn)
    return manager, conns


@pytest.mark.asyncio
async def test_recipient_receives_exactly_once(wired):
    manager, conns = wired
    relay = MessageRelay(manager)

    pushed = await relay.relay(_message(), ["bob"], origin=conns["a1"].id)

    assert pushed == 1
    frames = conns["b1"].transport.frames("get_message")
    assert len(frames) == 1
    assert frames[0].data.text == "Hi B"
    assert frames[0].data.sender.name == "Alice"
    assert frames[0].data.conversation == "conv-1"


@pytest.mark.asyncio
async def test_sender_gets_no_echo_by_default(wired):
    manager, conns = wired
    relay = MessageRelay(manager)

    await relay.relay(_message(), ["bob", "alice"], origin=conns["a1"].id)

    assert conns["a1"].transport.frames("get_message") == []
    assert conns["a2"].transport.frames("get_message") == []


@pytest.mark.asyncio
async def test_self_echo_reaches_other_sender_tabs_only(wired):
    manager, conns = wired
    relay = MessageRelay(manager, self_echo=True)

    pushed = await relay.relay(_message(), ["bob"], origin=conns["a1"].id)

    assert pushed == 2
    assert conns["a1"].transport.frames("get_message") == []
    assert len(conns["a2"].transport.frames("get_message")) == 1


@pytest.mark.asyncio
async def test_duplicate_recipients_are_collapsed(wired):
    manager, conns = wired
    relay = MessageRelay(manager)

    await relay.relay(_message(), ["bob", "bob"])

    assert len(conns["b1"].transport.frames("get_message")) == 1


@pytest.mark.asyncio
async def test_offline_recipient_is_silent(wired):
    manager, _ = wired
    relay = MessageRelay(manager)

    assert await relay.relay(_message(), ["carol"]) == 0
