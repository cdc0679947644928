from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from realtime_service.domain.entities.conversation import Conversation


class CreateConversationRequest(BaseModel):
    receiver_id: str = Field(min_length=1)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConversationResponse(BaseModel):
    id: UUID
    members: list[str]
    latest_message_id: UUID | None
    latest_message_text: str | None
    last_message_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_entity(cls, conversation: Conversation) -> ConversationResponse:
        return cls(
            id=conversation.id,
            members=list(conversation.members),
            latest_message_id=conversation.latest_message_id,
            latest_message_text=conversation.latest_message_text,
            last_message_at=conversation.last_message_at,
            created_at=conversation.created_at,
            updated_at=conversation.updated_at,
        )
