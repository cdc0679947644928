from __future__ import annotations

from typing import Any, Protocol


class ChannelPublisher(Protocol):
    """Publishes one fan-out payload to a channel every instance subscribes to."""

    async def publish(self, channel: str, payload: dict[str, Any]) -> None: ...
