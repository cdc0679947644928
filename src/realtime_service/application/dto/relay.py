from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class UserRef:
    """Denormalised user fields carried inside live events."""

    id: str
    name: str | None = None
    avatar: str | None = None


@dataclass(frozen=True, slots=True)
class RelayedMessage:
    """A message as pushed over the live channel.

    ``id`` is the durable message id when the caller has one; the recipient
    reconciles by ``client_msg_id`` otherwise.
    """

    conversation_id: str
    sender: UserRef
    text: str | None
    created_at: datetime
    client_msg_id: str | None = None
    id: str | None = None
    file_url: str | None = None
    file_name: str | None = None
    file_type: str | None = None
