"""Live channel client over a WebSocket connection."""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Protocol
from urllib.parse import urlencode

import websockets
from pydantic import ValidationError as PydanticValidationError

from realtime_service.client.config import ClientSettings
from realtime_service.client.exceptions import LiveChannelClosed
from realtime_service.infrastructure.ws.protocol import (
    OutboundFrame,
    WireModel,
    decode_outbound,
    encode_frame,
)

logger = logging.getLogger(__name__)


class LiveChannel(Protocol):
    async def emit(self, frame: WireModel) -> None: ...

    def events(self) -> AsyncIterator[OutboundFrame]: ...


class WebSocketLiveChannel:
    def __init__(self, url: str, token: str) -> None:
        self._url = f"{url}?{urlencode({'token': token})}"
        self._ws: websockets.ClientConnection | None = None

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> WebSocketLiveChannel:
        return cls(settings.WS_URL, settings.TOKEN)

    @property
    def connected(self) -> bool:
        return self._ws is not None

    async def connect(self) -> None:
        self._ws = await websockets.connect(self._url)
        logger.info("Live channel connected")

    async def close(self) -> None:
        if self._ws is not None:
            await self._ws.close()
            self._ws = None

    async def emit(self, frame: WireModel) -> None:
        if self._ws is None:
            raise LiveChannelClosed("live channel is not connected")
        try:
            await self._ws.send(encode_frame(frame))
        except websockets.ConnectionClosed as exc:
            self._ws = None
            raise LiveChannelClosed(str(exc)) from exc

    async def events(self) -> AsyncIterator[OutboundFrame]:
        """Yield server frames until the connection closes.

        Frames that do not match the protocol are logged and skipped.
        """
        if self._ws is None:
            raise LiveChannelClosed("live channel is not connected")
        try:
            async for raw in self._ws:
                try:
                    yield decode_outbound(raw)
                except PydanticValidationError:
                    logger.warning("Discarding malformed live frame: %.200s", raw)
        except websockets.ConnectionClosed:
            logger.info("Live channel closed by server")
        finally:
            self._ws = None
