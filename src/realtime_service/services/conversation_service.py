from __future__ import annotations

import uuid
from datetime import datetime, timezone

from realtime_service.application.dto.principal import Principal
from realtime_service.application.exceptions import ValidationError
from realtime_service.application.policies.permissions import assert_conversation_access
from realtime_service.application.uow import UnitOfWork
from realtime_service.domain.entities.conversation import Conversation, ordered_pair


async def get_or_create_direct_conversation(
    principal: Principal,
    receiver_id: str,
    uow: UnitOfWork,
) -> tuple[Conversation, bool]:
    """Return the conversation between the caller and ``receiver_id``, creating it once.

    Returns (conversation, created). Repeated calls for the same unordered pair
    return the same conversation.
    """
    if not receiver_id or receiver_id == principal.user_id:
        raise ValidationError("A conversation needs two distinct members")

    low, high = ordered_pair(principal.user_id, receiver_id)
    existing = await uow.conversations.get_by_members(low, high)
    if existing is not None:
        return existing, False

    now = datetime.now(timezone.utc)
    conversation = Conversation(
        id=uuid.uuid4(),
        member_low=low,
        member_high=high,
        latest_message_id=None,
        latest_message_text=None,
        last_message_at=None,
        created_at=now,
        updated_at=now,
    )
    conversation, created = await uow.conversations_w.create_if_not_exists(conversation)
    if created:
        await uow.commit()
    return conversation, created


async def list_user_conversations(
    principal: Principal,
    cursor: str | None,
    limit: int,
    uow: UnitOfWork,
) -> list[Conversation]:
    return await uow.conversations.list_for_user(
        principal.user_id, cursor=cursor, limit=limit,
    )


async def get_conversation(
    conversation_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> Conversation:
    conversation = await uow.conversations.get_by_id(conversation_id)
    return assert_conversation_access(principal, conversation)
