from __future__ import annotations

from typing import Protocol


class FriendRequestCounter(Protocol):
    async def get(self, user_id: str) -> int: ...

    async def increment(self, user_id: str, by: int = 1) -> int: ...

    async def reset(self, user_id: str) -> None: ...
