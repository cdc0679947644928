from __future__ import annotations

import uuid
from datetime import datetime, timezone

from realtime_service.application.dto.message import SendMessageDTO
from realtime_service.application.dto.principal import Principal
from realtime_service.application.exceptions import ValidationError
from realtime_service.application.policies.permissions import assert_conversation_access
from realtime_service.application.uow import UnitOfWork
from realtime_service.domain.entities.message import Message
from realtime_service.domain.value_objects.enums import MessageType


def _validate(dto: SendMessageDTO) -> None:
    if dto.type == MessageType.ATTACHMENT:
        if not dto.file_url:
            raise ValidationError("Attachment messages need a file_url")
    elif not (dto.text and dto.text.strip()):
        raise ValidationError("Message text must not be empty")


async def send_message(
    principal: Principal,
    dto: SendMessageDTO,
    uow: UnitOfWork,
) -> tuple[Message, bool]:
    """Persist a message idempotently.

    Returns (message, created). If a message with the same client_msg_id
    already exists the existing one is returned with created=False. Live
    delivery is not triggered here: the sending client emits it separately.
    """
    conversation = await uow.conversations.get_by_id(dto.conversation_id)
    assert_conversation_access(principal, conversation)
    _validate(dto)

    now = datetime.now(timezone.utc)
    msg = Message(
        id=uuid.uuid4(),
        conversation_id=dto.conversation_id,
        sender_id=principal.user_id,
        type=dto.type.value,
        text=dto.text,
        file_url=dto.file_url,
        file_name=dto.file_name,
        file_type=dto.file_type,
        client_msg_id=dto.client_msg_id,
        created_at=now,
    )

    msg, created = await uow.messages_w.create_if_not_exists(msg)

    if created:
        await uow.conversations_w.touch_latest_message(
            dto.conversation_id, msg.id, msg.text or msg.file_name, msg.created_at,
        )
        await uow.commit()

    return msg, created


async def list_messages(
    conversation_id: uuid.UUID,
    principal: Principal,
    cursor: str | None,
    limit: int,
    uow: UnitOfWork,
) -> list[Message]:
    """Chronological history; this order is authoritative for clients."""
    conversation = await uow.conversations.get_by_id(conversation_id)
    assert_conversation_access(principal, conversation)
    return await uow.messages.list_messages(
        conversation_id, cursor=cursor, limit=limit,
    )
