from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from realtime_service.infrastructure.ws.protocol import OutboundFrame


class LiveDelivery(Protocol):
    """Pushes server frames to live connections.

    Implementations never raise for offline users and return the number of
    connections the frame was written to by this process (a publisher that
    hands delivery to other processes returns 0). ``exclude`` is a
    connection id that must not receive the frame.
    """

    async def send_to_user(
        self,
        user_id: str,
        frame: OutboundFrame,
        *,
        exclude: str | None = None,
    ) -> int: ...

    async def broadcast(self, frame: OutboundFrame) -> int: ...
