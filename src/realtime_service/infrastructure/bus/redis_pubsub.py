"""Redis Pub/Sub fan-out across service instances.

Every instance publishes deliveries to one channel and every instance,
including the publisher, delivers what it receives to its own connections.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

import redis.asyncio as aioredis

from realtime_service.application.ports.bus import ChannelPublisher
from realtime_service.infrastructure.bus.serializer import deserialize_event, serialize_event
from realtime_service.infrastructure.ws.manager import ConnectionManager
from realtime_service.infrastructure.ws.protocol import OutboundFrame, decode_outbound

logger = logging.getLogger(__name__)

EVENT_DELIVER = "fanout.deliver"
EVENT_BROADCAST = "fanout.broadcast"


class RedisPubSubPublisher:
    """Implements application.ports.bus.ChannelPublisher."""

    def __init__(self, redis: aioredis.Redis) -> None:
        self._redis = redis

    async def publish(self, channel: str, payload: dict[str, Any]) -> None:
        raw = serialize_event(payload.get("event_type", "unknown"), payload)
        await self._redis.publish(channel, raw)


class RedisFanoutDelivery:
    """LiveDelivery that routes every frame through the Pub/Sub channel."""

    def __init__(self, publisher: ChannelPublisher, channel: str) -> None:
        self._publisher = publisher
        self._channel = channel

    async def send_to_user(
        self,
        user_id: str,
        frame: OutboundFrame,
        *,
        exclude: str | None = None,
    ) -> int:
        await self._publish(EVENT_DELIVER, frame, user_id=user_id, exclude=exclude)
        return 0

    async def broadcast(self, frame: OutboundFrame) -> int:
        await self._publish(EVENT_BROADCAST, frame)
        return 0

    async def _publish(self, event_type: str, frame: OutboundFrame, **target: Any) -> None:
        payload = {
            "event_type": event_type,
            "frame": frame,
            **target,
        }
        try:
            await self._publisher.publish(self._channel, payload)
        except Exception:
            # live delivery is best-effort; the REST path stays authoritative
            logger.warning("Fan-out publish failed for %s", frame.type, exc_info=True)


OnEventCallback = Callable[[str, dict[str, Any]], Coroutine[Any, Any, None]]


def local_dispatcher(manager: ConnectionManager) -> OnEventCallback:
    """Callback that hands a received fan-out event to local connections."""

    async def _dispatch(event_type: str, data: dict[str, Any]) -> None:
        raw_frame = data.get("frame")
        if not isinstance(raw_frame, dict):
            logger.warning("Fan-out event %s without frame, dropped", event_type)
            return
        frame = decode_outbound(raw_frame)
        if event_type == EVENT_BROADCAST:
            await manager.broadcast(frame)
        elif event_type == EVENT_DELIVER:
            user_id = data.get("user_id")
            if not user_id:
                return
            await manager.send_to_user(user_id, frame, exclude=data.get("exclude"))
        else:
            logger.debug("Ignoring unknown fan-out event: %s", event_type)

    return _dispatch


class RedisPubSubSubscriber:
    """Background task that listens to a Redis channel and dispatches events."""

    def __init__(
        self,
        redis: aioredis.Redis,
        channel: str,
        callback: OnEventCallback,
    ) -> None:
        self._redis = redis
        self._channel = channel
        self._callback = callback
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        self._task = asyncio.create_task(self._listen(), name="redis-pubsub-subscriber")
        logger.info("Redis Pub/Sub subscriber started on channel=%s", self._channel)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info("Redis Pub/Sub subscriber stopped")

    async def _listen(self) -> None:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._channel)
        try:
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                try:
                    event_type, data = deserialize_event(message["data"])
                    await self._callback(event_type, data)
                except Exception:
                    logger.exception("Error processing pubsub message")
        finally:
            await pubsub.unsubscribe(self._channel)
            await pubsub.aclose()
