from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity extracted from JWT."""

    user_id: str
    name: str | None = None
    avatar: str | None = None
    roles: list[str] = field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return "admin" in self.roles or "service" in self.roles
