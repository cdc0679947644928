"""In-process WebSocket connection manager."""
from __future__ import annotations

import logging
from typing import Awaitable, Callable

from realtime_service.domain.entities.connection import Connection
from realtime_service.infrastructure.ws.protocol import (
    GetUsersFrame,
    OnlineUser,
    OutboundFrame,
    encode_frame,
)
from realtime_service.services.presence_registry import PresenceRegistry

logger = logging.getLogger(__name__)

DisconnectHook = Callable[[Connection], Awaitable[None]]


class ConnectionManager:
    """Writes frames to the connections held in the presence registry.

    Implements ``application.ports.delivery.LiveDelivery`` for this process.
    A failed write is treated as a dropped transport: the connection is
    deregistered and never surfaces an error to the caller.
    """

    def __init__(
        self,
        registry: PresenceRegistry,
        *,
        broadcast_presence: bool = True,
    ) -> None:
        self._registry = registry
        self._broadcast_presence = broadcast_presence
        self._disconnect_hooks: list[DisconnectHook] = []

    @property
    def registry(self) -> PresenceRegistry:
        return self._registry

    def on_disconnect(self, hook: DisconnectHook) -> None:
        self._disconnect_hooks.append(hook)

    async def connect(self, connection: Connection) -> None:
        self._registry.register(connection.user_id, connection)
        logger.debug(
            "WS connected: %s/%s (total=%d)",
            connection.user_id, connection.id, len(self._registry),
        )
        await self.broadcast_presence()

    async def disconnect(self, connection: Connection) -> None:
        user_id = self._registry.deregister(connection)
        if user_id is None:
            return
        logger.debug("WS disconnected: %s/%s", user_id, connection.id)
        for hook in self._disconnect_hooks:
            try:
                await hook(connection)
            except Exception:
                logger.exception("Disconnect hook failed for %s", connection.id)
        await self.broadcast_presence()

    async def broadcast_presence(self) -> None:
        if not self._broadcast_presence:
            return
        frame = GetUsersFrame(
            data=[OnlineUser(user_id=u) for u in self._registry.online_users()],
        )
        await self.broadcast(frame)

    async def broadcast(self, frame: OutboundFrame) -> int:
        """Send a frame to every local connection."""
        return await self._write(self._registry.all_connections(), encode_frame(frame))

    async def send_to_user(
        self,
        user_id: str,
        frame: OutboundFrame,
        *,
        exclude: str | None = None,
    ) -> int:
        """Send a frame to each connection of a user, once per connection."""
        targets = [c for c in self._registry.handles_for(user_id) if c.id != exclude]
        if not targets:
            return 0
        return await self._write(targets, encode_frame(frame))

    async def send_to_connection(self, connection: Connection, frame: OutboundFrame) -> bool:
        return await self._write([connection], encode_frame(frame)) == 1

    async def _write(self, targets: list[Connection], raw: str) -> int:
        sent = 0
        dead: list[Connection] = []
        for conn in targets:
            try:
                await conn.send_text(raw)
                sent += 1
            except Exception:
                logger.debug("WS write failed for %s", conn.id, exc_info=True)
                dead.append(conn)
        for conn in dead:
            await self.disconnect(conn)
        return sent
