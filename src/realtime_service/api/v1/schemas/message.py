from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from realtime_service.domain.value_objects.enums import MessageType


class SendMessageRequest(BaseModel):
    client_msg_id: UUID
    type: MessageType = MessageType.TEXT
    text: str | None = None
    file_url: str | None = None
    file_name: str | None = None
    file_type: str | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(BaseModel):
    id: UUID
    conversation_id: UUID
    sender_id: str
    type: str
    text: str | None
    file_url: str | None
    file_name: str | None
    file_type: str | None
    client_msg_id: UUID
    created_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)
