from __future__ import annotations

from realtime_service.domain.entities.message import Message
from realtime_service.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        conversation_id=model.conversation_id,
        sender_id=model.sender_id,
        type=model.type,
        text=model.text,
        file_url=model.file_url,
        file_name=model.file_name,
        file_type=model.file_type,
        client_msg_id=model.client_msg_id,
        created_at=model.created_at,
    )


def entity_to_values(entity: Message) -> dict[str, object]:
    return {
        "id": entity.id,
        "conversation_id": entity.conversation_id,
        "sender_id": entity.sender_id,
        "type": entity.type,
        "text": entity.text,
        "file_url": entity.file_url,
        "file_name": entity.file_name,
        "file_type": entity.file_type,
        "client_msg_id": entity.client_msg_id,
        "created_at": entity.created_at,
    }
