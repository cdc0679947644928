"""Client-side views of REST records plus local reconciliation state."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from realtime_service.domain.value_objects.enums import NotificationType


class _View(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ConversationView(_View):
    id: str
    members: list[str]
    latest_message_id: str | None = None
    latest_message_text: str | None = None
    last_message_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def other_member(self, user_id: str) -> str | None:
        return next((m for m in self.members if m != user_id), None)


class MessageView(_View):
    id: str
    conversation_id: str
    sender_id: str
    type: str = "text"
    text: str | None = None
    file_url: str | None = None
    file_name: str | None = None
    file_type: str | None = None
    client_msg_id: str
    created_at: datetime


@dataclass(slots=True)
class ChatEntry:
    """One row of the open conversation's timeline.

    ``id`` is None until the server has a durable record of the message.
    """

    conversation_id: str
    sender_id: str
    text: str | None
    created_at: datetime
    id: str | None = None
    client_msg_id: str | None = None
    pending: bool = False
    file_url: str | None = None
    file_name: str | None = None
    file_type: str | None = None

    @classmethod
    def from_view(cls, view: MessageView) -> ChatEntry:
        return cls(
            conversation_id=view.conversation_id,
            sender_id=view.sender_id,
            text=view.text,
            created_at=view.created_at,
            id=view.id,
            client_msg_id=view.client_msg_id,
            file_url=view.file_url,
            file_name=view.file_name,
            file_type=view.file_type,
        )

    def same_message(self, other: ChatEntry) -> bool:
        if self.id is not None and self.id == other.id:
            return True
        return self.client_msg_id is not None and self.client_msg_id == other.client_msg_id


@dataclass(slots=True)
class ConversationState:
    view: ConversationView
    unread: int = 0
    preview: str | None = None
    last_message_at: datetime | None = None

    @classmethod
    def from_view(cls, view: ConversationView) -> ConversationState:
        return cls(
            view=view,
            preview=view.latest_message_text,
            last_message_at=view.last_message_at,
        )


@dataclass(slots=True)
class Notification:
    id: str
    type: NotificationType
    payload: dict[str, Any]
    received_at: datetime
