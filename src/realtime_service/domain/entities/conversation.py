from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


def ordered_pair(user_a: str, user_b: str) -> tuple[str, str]:
    """Canonical member ordering; one conversation exists per unordered pair."""
    return (user_a, user_b) if user_a <= user_b else (user_b, user_a)


@dataclass(frozen=True, slots=True)
class Conversation:
    id: UUID
    member_low: str
    member_high: str
    latest_message_id: UUID | None
    latest_message_text: str | None
    last_message_at: datetime | None
    created_at: datetime
    updated_at: datetime

    @property
    def members(self) -> tuple[str, str]:
        return (self.member_low, self.member_high)

    def has_member(self, user_id: str) -> bool:
        return user_id in self.members

    def other_member(self, user_id: str) -> str:
        return self.member_high if user_id == self.member_low else self.member_low
