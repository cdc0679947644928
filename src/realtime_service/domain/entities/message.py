from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Message:
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
