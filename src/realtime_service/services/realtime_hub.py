"""Wiring of the live-channel components around one presence registry."""
from __future__ import annotations

from dataclasses import dataclass

from realtime_service.application.ports.delivery import LiveDelivery
from realtime_service.config import Settings
from realtime_service.infrastructure.ws.manager import ConnectionManager
from realtime_service.services.message_relay import MessageRelay
from realtime_service.services.notification_fanout import NotificationFanout
from realtime_service.services.presence_registry import PresenceRegistry
from realtime_service.services.typing_tracker import TypingTracker


@dataclass(slots=True)
class RealtimeHub:
    registry: PresenceRegistry
    manager: ConnectionManager
    relay: MessageRelay
    typing: TypingTracker
    notifications: NotificationFanout


def build_hub(settings: Settings, delivery: LiveDelivery | None = None) -> RealtimeHub:
    """Create the per-process hub.

    ``delivery`` defaults to the local connection manager; pass a Redis
    fan-out delivery to route pushes through other instances.
    """
    registry = PresenceRegistry()
    manager = ConnectionManager(registry, broadcast_presence=settings.BROADCAST_PRESENCE)
    sink: LiveDelivery = delivery or manager
    typing = TypingTracker(sink, stop_on_disconnect=settings.TYPING_STOP_ON_DISCONNECT)
    manager.on_disconnect(typing.on_disconnect)
    return RealtimeHub(
        registry=registry,
        manager=manager,
        relay=MessageRelay(sink, self_echo=settings.RELAY_SELF_ECHO),
        typing=typing,
        notifications=NotificationFanout(sink),
    )
