"""Entry point for domain events raised by the friends and bookings subsystems."""
from __future__ import annotations

import logging

from fastapi import APIRouter, status

from realtime_service.api.deps import CurrentService, HubDep, UoWDep
from realtime_service.api.v1.schemas.notification import (
    BookingStatusEvent,
    DomainEventRequest,
    FriendRequestAcceptedEvent,
    FriendRequestSentEvent,
    NewBookingEvent,
    NotificationAccepted,
    UserRefIn,
)
from realtime_service.application.dto.relay import UserRef
from realtime_service.services import friend_request_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/internal/notifications", tags=["internal"])


def _ref(user: UserRefIn) -> UserRef:
    return UserRef(id=user.id, name=user.name, avatar=user.avatar)


@router.post("", response_model=NotificationAccepted, status_code=status.HTTP_202_ACCEPTED)
async def submit_notification(
    body: DomainEventRequest,
    service: CurrentService,
    hub: HubDep,
    uow: UoWDep,
) -> NotificationAccepted:
    event = body.root
    fanout = hub.notifications
    if isinstance(event, FriendRequestSentEvent):
        await friend_request_service.increment_pending_count(event.recipient_id, uow)
        notification_id = await fanout.friend_request_sent(
            event.recipient_id, event.request_id, _ref(event.requester),
        )
    elif isinstance(event, FriendRequestAcceptedEvent):
        notification_id = await fanout.friend_request_accepted(
            event.requester_id, event.request_id, _ref(event.new_friend),
        )
    elif isinstance(event, NewBookingEvent):
        notification_id = await fanout.new_booking(
            event.provider_id,
            event.booking_id,
            _ref(event.customer),
            event.service_id,
            event.service_title,
            event.message,
        )
    elif isinstance(event, BookingStatusEvent):
        notification_id = await fanout.booking_status_changed(
            event.customer_id,
            event.booking_id,
            event.status,
            event.service_id,
            event.service_title,
            event.message,
            _ref(event.customer) if event.customer else None,
        )
    else:  # pragma: no cover
        raise AssertionError(f"unhandled event {event!r}")
    logger.debug("Accepted %s from %s", event.event, service.user_id)
    return NotificationAccepted(notification_id=notification_id)
