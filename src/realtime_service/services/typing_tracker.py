"""Relay of typing start/stop signals between users."""
from __future__ import annotations

import logging

from realtime_service.application.ports.delivery import LiveDelivery
from realtime_service.domain.entities.connection import Connection
from realtime_service.infrastructure.ws.protocol import UserTypingData, UserTypingFrame

logger = logging.getLogger(__name__)


class TypingTracker:
    """Pure relay: the sending client owns the inactivity timer.

    The only state kept is which targets each connection currently reports
    typing to, so a dropped connection can emit the matching stops.
    """

    def __init__(self, delivery: LiveDelivery, *, stop_on_disconnect: bool = True) -> None:
        self._delivery = delivery
        self._stop_on_disconnect = stop_on_disconnect
        self._open: dict[str, set[str]] = {}

    async def on_typing_start(self, typer_id: str, target_id: str, connection: Connection | None = None) -> None:
        if typer_id == target_id:
            return
        if connection is not None:
            self._open.setdefault(connection.id, set()).add(target_id)
        await self._send(typer_id, target_id, True)

    async def on_typing_stop(self, typer_id: str, target_id: str, connection: Connection | None = None) -> None:
        if typer_id == target_id:
            return
        if connection is not None:
            targets = self._open.get(connection.id)
            if targets is not None:
                targets.discard(target_id)
                if not targets:
                    del self._open[connection.id]
        await self._send(typer_id, target_id, False)

    async def on_disconnect(self, connection: Connection) -> None:
        targets = self._open.pop(connection.id, set())
        if not self._stop_on_disconnect:
            return
        for target_id in sorted(targets):
            logger.debug("Implicit typing stop %s -> %s on disconnect", connection.user_id, target_id)
            await self._send(connection.user_id, target_id, False)

    def typing_targets(self, connection: Connection) -> set[str]:
        return set(self._open.get(connection.id, set()))

    async def _send(self, typer_id: str, target_id: str, is_typing: bool) -> None:
        frame = UserTypingFrame(data=UserTypingData(user_id=typer_id, is_typing=is_typing))
        await self._delivery.send_to_user(target_id, frame)
