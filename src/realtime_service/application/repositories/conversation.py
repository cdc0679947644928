from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from realtime_service.domain.entities.conversation import Conversation


class ConversationReader(Protocol):
    async def get_by_id(self, conversation_id: UUID) -> Conversation | None: ...

    async def get_by_members(self, member_low: str, member_high: str) -> Conversation | None:
        """Find the conversation for a canonically ordered member pair."""
        ...

    async def list_for_user(
        self, user_id: str, *, cursor: str | None = None, limit: int = 20
    ) -> list[Conversation]: ...


class ConversationWriter(Protocol):
    async def create_if_not_exists(self, conversation: Conversation) -> tuple[Conversation, bool]:
        """Insert conversation. On member-pair conflict return the existing one."""
        ...

    async def touch_latest_message(
        self,
        conversation_id: UUID,
        message_id: UUID,
        text: str | None,
        ts: datetime,
    ) -> None: ...
