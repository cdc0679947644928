"""Typed push notifications for friend and booking events, plus read-state sync."""
from __future__ import annotations

import logging
import uuid

from realtime_service.application.dto.relay import UserRef
from realtime_service.application.exceptions import ValidationError
from realtime_service.application.ports.delivery import LiveDelivery
from realtime_service.domain.value_objects.enums import (
    BOOKING_NOTIFICATION_TYPES,
    BookingStatus,
)
from realtime_service.infrastructure.ws.protocol import (
    BookingStatusData,
    BookingStatusFrame,
    FriendRequestAcceptedData,
    FriendRequestAcceptedFrame,
    FriendRequestSentData,
    FriendRequestSentFrame,
    NewBookingData,
    NewBookingFrame,
    NotificationRemovedData,
    NotificationRemovedFrame,
    ServiceSummary,
    UserSummary,
)

logger = logging.getLogger(__name__)


def _new_notification_id() -> str:
    return uuid.uuid4().hex


def _summary(user: UserRef) -> UserSummary:
    return UserSummary(id=user.id, name=user.name, avatar=user.avatar)


class NotificationFanout:
    """Translates domain events into live notification frames.

    Every event carries the denormalised names and titles a client needs to
    render it without another fetch. Each call returns the notification id
    shared by all of the recipient's devices.
    """

    def __init__(self, delivery: LiveDelivery) -> None:
        self._delivery = delivery

    async def friend_request_sent(
        self,
        recipient_id: str,
        request_id: str,
        requester: UserRef,
    ) -> str:
        notification_id = _new_notification_id()
        frame = FriendRequestSentFrame(
            data=FriendRequestSentData(
                notification_id=notification_id,
                request_id=request_id,
                recipient_id=recipient_id,
                requester=_summary(requester),
            ),
        )
        await self._delivery.send_to_user(recipient_id, frame)
        logger.info("Friend request %s notified to %s", request_id, recipient_id)
        return notification_id

    async def friend_request_accepted(
        self,
        requester_id: str,
        request_id: str,
        new_friend: UserRef,
    ) -> str:
        notification_id = _new_notification_id()
        frame = FriendRequestAcceptedFrame(
            data=FriendRequestAcceptedData(
                notification_id=notification_id,
                request_id=request_id,
                requester_id=requester_id,
                new_friend=_summary(new_friend),
            ),
        )
        await self._delivery.send_to_user(requester_id, frame)
        logger.info("Friend request %s acceptance notified to %s", request_id, requester_id)
        return notification_id

    async def new_booking(
        self,
        provider_id: str,
        booking_id: str,
        customer: UserRef,
        service_id: str | None,
        service_title: str | None,
        message: str | None = None,
    ) -> str:
        notification_id = _new_notification_id()
        frame = NewBookingFrame(
            data=NewBookingData(
                notification_id=notification_id,
                booking_id=booking_id,
                customer=_summary(customer),
                service=ServiceSummary(id=service_id, title=service_title),
                message=message,
            ),
        )
        await self._delivery.send_to_user(provider_id, frame)
        logger.info("Booking %s notified to provider %s", booking_id, provider_id)
        return notification_id

    async def booking_status_changed(
        self,
        customer_id: str,
        booking_id: str,
        status: BookingStatus,
        service_id: str | None,
        service_title: str | None,
        message: str | None = None,
        customer: UserRef | None = None,
    ) -> str:
        notification_type = BOOKING_NOTIFICATION_TYPES.get(status)
        if notification_type is None:
            raise ValidationError(f"No notification for booking status {status}")
        notification_id = _new_notification_id()
        frame = BookingStatusFrame(
            data=BookingStatusData(
                notification_id=notification_id,
                booking_id=booking_id,
                status=status,
                type=notification_type,
                service=ServiceSummary(id=service_id, title=service_title),
                customer=_summary(customer) if customer else None,
                message=message,
            ),
        )
        await self._delivery.send_to_user(customer_id, frame)
        logger.info("Booking %s -> %s notified to %s", booking_id, status, customer_id)
        return notification_id

    async def notification_removed(
        self,
        user_id: str,
        notification_id: str,
        *,
        origin: str | None = None,
    ) -> int:
        """Tell the user's other devices that a notification was read."""
        frame = NotificationRemovedFrame(
            data=NotificationRemovedData(notification_id=notification_id),
        )
        return await self._delivery.send_to_user(user_id, frame, exclude=origin)
