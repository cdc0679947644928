from __future__ import annotations

from realtime_service.domain.entities.conversation import Conversation
from realtime_service.infrastructure.db.models.conversation import ConversationModel


def model_to_entity(model: ConversationModel) -> Conversation:
    return Conversation(
        id=model.id,
        member_low=model.member_low,
        member_high=model.member_high,
        latest_message_id=model.latest_message_id,
        latest_message_text=model.latest_message_text,
        last_message_at=model.last_message_at,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_values(entity: Conversation) -> dict[str, object]:
    return {
        "id": entity.id,
        "member_low": entity.member_low,
        "member_high": entity.member_high,
        "latest_message_id": entity.latest_message_id,
        "latest_message_text": entity.latest_message_text,
        "last_message_at": entity.last_message_at,
        "created_at": entity.created_at,
        "updated_at": entity.updated_at,
    }
