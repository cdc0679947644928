"""In-memory notification feed kept in sync across a user's devices."""
from __future__ import annotations

import logging
import uuid
from collections import Counter
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from realtime_service.application.ports.clock import Clock, SystemClock
from realtime_service.client.models import Notification
from realtime_service.domain.value_objects.enums import NotificationType
from realtime_service.infrastructure.ws.protocol import (
    BookingStatusFrame,
    FriendRequestAcceptedFrame,
    FriendRequestSentFrame,
    GetMessageFrame,
    NewBookingFrame,
    OutboundFrame,
    RemoveNotificationData,
    RemoveNotificationFrame,
    WireModel,
    decode_outbound,
)

logger = logging.getLogger(__name__)

Emit = Callable[[WireModel], Awaitable[None]]


def _classify(frame: OutboundFrame) -> tuple[NotificationType, str | None] | None:
    if isinstance(frame, GetMessageFrame):
        return NotificationType.MESSAGE, frame.data.id or frame.data.client_msg_id
    if isinstance(frame, FriendRequestSentFrame):
        return NotificationType.FRIEND_REQUEST, frame.data.notification_id
    if isinstance(frame, FriendRequestAcceptedFrame):
        return NotificationType.FRIEND_ACCEPTED, frame.data.notification_id
    if isinstance(frame, NewBookingFrame):
        return NotificationType.NEW_BOOKING, frame.data.notification_id
    if isinstance(frame, BookingStatusFrame):
        return frame.data.type, frame.data.notification_id
    return None


class NotificationFeed:
    """Newest-first list of notifications for one signed-in user.

    The friend-request counter follows the server's pending count: it grows
    with every ``friend_request_sent`` and is cleared only by
    ``clear_friend_request_notifications``. Reading a notification never
    changes it.
    """

    def __init__(
        self,
        user_id: str,
        emit: Emit | None = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._user_id = user_id
        self._emit = emit
        self._clock = clock or SystemClock()
        self._items: list[Notification] = []
        self.friend_request_count = 0

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> list[Notification]:
        return list(self._items)

    def add(self, event: OutboundFrame | dict[str, Any] | str) -> Notification | None:
        """Validate a live event and put it at the top of the feed.

        Returns None for events that are malformed or carry no notification.
        """
        if not isinstance(event, WireModel):
            try:
                event = decode_outbound(event)
            except PydanticValidationError:
                logger.warning("Discarding malformed notification event")
                return None
        classified = _classify(event)
        if classified is None:
            return None
        notification_type, notification_id = classified
        notification_id = notification_id or uuid.uuid4().hex
        if any(n.id == notification_id for n in self._items):
            return None

        notification = Notification(
            id=notification_id,
            type=notification_type,
            payload=event.data.model_dump(by_alias=True, mode="json"),
            received_at=self._clock.now(),
        )
        self._items.insert(0, notification)
        if notification_type == NotificationType.FRIEND_REQUEST:
            self.friend_request_count += 1
        return notification

    async def mark_as_read(self, notification_id: str) -> bool:
        """Drop a notification here and ask the server to drop it on other devices."""
        if not self._remove(notification_id):
            return False
        if self._emit is not None:
            frame = RemoveNotificationFrame(
                data=RemoveNotificationData(notification_id=notification_id, user_id=self._user_id),
            )
            try:
                await self._emit(frame)
            except Exception:
                logger.warning("Could not sync read state of %s", notification_id, exc_info=True)
        return True

    def handle_removed(self, notification_id: str) -> bool:
        return self._remove(notification_id)

    def clear_friend_request_notifications(self) -> None:
        self._items = [n for n in self._items if n.type != NotificationType.FRIEND_REQUEST]
        self.friend_request_count = 0

    def by_type(self, notification_type: NotificationType) -> list[Notification]:
        return [n for n in self._items if n.type == notification_type]

    def count_by_type(self) -> dict[NotificationType, int]:
        return dict(Counter(n.type for n in self._items))

    def _remove(self, notification_id: str) -> bool:
        before = len(self._items)
        self._items = [n for n in self._items if n.id != notification_id]
        return len(self._items) != before
