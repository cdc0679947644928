from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from realtime_service.domain.value_objects.enums import MessageType


@dataclass(frozen=True, slots=True)
class SendMessageDTO:
    conversation_id: UUID
    client_msg_id: UUID
    type: MessageType = MessageType.TEXT
    text: str | None = None
    file_url: str | None = None
    file_name: str | None = None
    file_type: str | None = None
