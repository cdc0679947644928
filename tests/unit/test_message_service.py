from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from realtime_service.application.dto.message import SendMessageDTO
from realtime_service.application.dto.principal import Principal
from realtime_service.application.exceptions import ForbiddenError, ValidationError
from realtime_service.domain.value_objects.enums import MessageType
from realtime_service.services import message_service
from tests.conftest import FakeUoW, make_conversation, make_message


@pytest.fixture
def uow_with_conversation():
    uow = FakeUoW()
    conv = uow.add_conversation(make_conversation("alice", "bob"))
    return uow, conv


@pytest.mark.asyncio
async def test_send_message_creates_message(alice, uow_with_conversation):
    uow, conv = uow_with_conversation
    client_msg_id = uuid.uuid4()

    msg, created = await message_service.send_message(
        alice, SendMessageDTO(conversation_id=conv.id, client_msg_id=client_msg_id, text="hello"), uow,
    )

    assert created is True
    assert msg.text == "hello"
    assert msg.sender_id == "alice"
    assert msg.client_msg_id == client_msg_id
    assert uow._committed is True


@pytest.mark.asyncio
async def test_send_message_updates_latest_message(alice, uow_with_conversation):
    uow, conv = uow_with_conversation

    msg, _ = await message_service.send_message(
        alice, SendMessageDTO(conversation_id=conv.id, client_msg_id=uuid.uuid4(), text="latest"), uow,
    )

    stored = uow.conversations._store[conv.id]
    assert stored.latest_message_id == msg.id
    assert stored.latest_message_text == "latest"
    assert stored.last_message_at == msg.created_at


@pytest.mark.asyncio
async def test_send_message_idempotent(alice, uow_with_conversation):
    uow, conv = uow_with_conversation
    dto = SendMessageDTO(conversation_id=conv.id, client_msg_id=uuid.uuid4(), text="hello")

    msg1, created1 = await message_service.send_message(alice, dto, uow)
    uow._committed = False
    msg2, created2 = await message_service.send_message(alice, dto, uow)

    assert created1 is True
    assert created2 is False
    assert msg1.id == msg2.id
    assert uow._committed is False
    assert len(uow.messages._messages) == 1


@pytest.mark.asyncio
async def test_non_member_cannot_send(uow_with_conversation):
    uow, conv = uow_with_conversation

    with pytest.raises(ForbiddenError):
        await message_service.send_message(
            Principal(user_id="mallory"),
            SendMessageDTO(conversation_id=conv.id, client_msg_id=uuid.uuid4(), text="hi"),
            uow,
        )


@pytest.mark.asyncio
async def test_blank_text_rejected(alice, uow_with_conversation):
    uow, conv = uow_with_conversation

    with pytest.raises(ValidationError):
        await message_service.send_message(
            alice, SendMessageDTO(conversation_id=conv.id, client_msg_id=uuid.uuid4(), text="   "), uow,
        )


@pytest.mark.asyncio
async def test_attachment_needs_file_url(alice, uow_with_conversation):
    uow, conv = uow_with_conversation

    with pytest.raises(ValidationError):
        await message_service.send_message(
            alice,
            SendMessageDTO(
                conversation_id=conv.id,
                client_msg_id=uuid.uuid4(),
                type=MessageType.ATTACHMENT,
                file_name="quote.pdf",
            ),
            uow,
        )


@pytest.mark.asyncio
async def test_list_messages_chronological(bob, uow_with_conversation):
    uow, conv = uow_with_conversation
    base = datetime(2026, 3, 1, tzinfo=timezone.utc)
    later = make_message(conversation_id=conv.id, text="second", created_at=base + timedelta(seconds=5))
    earlier = make_message(conversation_id=conv.id, sender_id="bob", text="first", created_at=base)
    uow.messages._messages.extend([later, earlier])

    messages = await message_service.list_messages(conv.id, bob, None, 50, uow)

    assert [m.text for m in messages] == ["first", "second"]


@pytest.mark.asyncio
async def test_list_messages_forbidden_for_outsider(uow_with_conversation):
    uow, conv = uow_with_conversation

    with pytest.raises(ForbiddenError):
        await message_service.list_messages(conv.id, Principal(user_id="mallory"), None, 50, uow)
