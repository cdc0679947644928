from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol
from uuid import uuid4


class Transport(Protocol):
    async def send_text(self, data: str) -> None: ...


def _new_connection_id() -> str:
    return uuid4().hex


@dataclass(eq=False, slots=True)
class Connection:
    """One live transport session owned by a user.

    Compared by identity: two sessions of the same user are distinct connections.
    """

    user_id: str
    transport: Transport | Any
    id: str = field(default_factory=_new_connection_id)
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    name: str | None = None
    avatar: str | None = None

    async def send_text(self, data: str) -> None:
        await self.transport.send_text(data)
