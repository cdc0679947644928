from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from realtime_service.application.ports.clock import Clock, SystemClock
from realtime_service.infrastructure.ws.protocol import (
    TypingData,
    TypingStartFrame,
    TypingStopFrame,
    WireModel,
)

logger = logging.getLogger(__name__)

Emit = Callable[[WireModel], Awaitable[None]]

DEFAULT_WINDOW_SECONDS = 1.0


class TypingDebouncer:
    """Turns a stream of keystrokes into one start and one stop per burst.

    ``on_input`` emits ``typing_start`` only when the target goes from idle to
    typing and otherwise just pushes the deadline out. ``expire`` emits
    ``typing_stop`` once for every target whose deadline has passed.
    """

    def __init__(
        self,
        user_id: str,
        emit: Emit,
        *,
        window: float = DEFAULT_WINDOW_SECONDS,
        clock: Clock | None = None,
    ) -> None:
        self._user_id = user_id
        self._emit = emit
        self._window = window
        self._clock = clock or SystemClock()
        self._deadlines: dict[str, float] = {}

    def is_typing(self, target_user_id: str) -> bool:
        return target_user_id in self._deadlines

    async def on_input(self, target_user_id: str) -> None:
        starting = target_user_id not in self._deadlines
        self._deadlines[target_user_id] = self._clock.monotonic() + self._window
        if starting:
            await self._send(TypingStartFrame, target_user_id)

    async def stop(self, target_user_id: str) -> None:
        """End a burst immediately, e.g. when the message is sent."""
        if self._deadlines.pop(target_user_id, None) is not None:
            await self._send(TypingStopFrame, target_user_id)

    async def expire(self) -> list[str]:
        now = self._clock.monotonic()
        expired = sorted(t for t, deadline in self._deadlines.items() if deadline <= now)
        for target in expired:
            del self._deadlines[target]
            await self._send(TypingStopFrame, target)
        return expired

    async def run(self, interval: float | None = None) -> None:
        tick = interval if interval is not None else self._window / 4
        while True:
            await asyncio.sleep(tick)
            await self.expire()

    async def _send(
        self,
        frame_cls: type[TypingStartFrame] | type[TypingStopFrame],
        target_user_id: str,
    ) -> None:
        frame = frame_cls(data=TypingData(user_id=self._user_id, target_user_id=target_user_id))
        try:
            await self._emit(frame)
        except Exception:
            logger.warning("Could not emit %s to %s", frame.type, target_user_id, exc_info=True)
