from __future__ import annotations

import pytest

from realtime_service.application.dto.relay import UserRef
from realtime_service.application.exceptions import ValidationError
from realtime_service.domain.value_objects.enums import BookingStatus, NotificationType
from realtime_service.infrastructure.ws.manager import ConnectionManager
from realtime_service.services.notification_fanout import NotificationFanout
from realtime_service.services.presence_registry import PresenceRegistry
from tests.conftest import RecordingDelivery, make_connection


@pytest.mark.asyncio
async def test_friend_request_sent_carries_requester():
    delivery = RecordingDelivery()
    fanout = NotificationFanout(delivery)

    notification_id = await fanout.friend_request_sent(
        "bob", "req-1", UserRef(id="alice", name="Alice", avatar="a.png"),
    )

    (frame,) = delivery.frames_for("bob")
    assert frame.type == "friend_request_sent"
    assert frame.data.notification_id == notification_id
    assert frame.data.requester.name == "Alice"


@pytest.mark.asyncio
async def test_friend_request_accepted_goes_to_requester():
    delivery = RecordingDelivery()
    fanout = NotificationFanout(delivery)

    await fanout.friend_request_accepted("alice", "req-1", UserRef(id="bob", name="Bob"))

    (frame,) = delivery.frames_for("alice")
    assert frame.type == "friend_request_accepted"
    assert frame.data.new_friend.id == "bob"


@pytest.mark.asyncio
async def test_new_booking_goes_to_provider():
    delivery = RecordingDelivery()
    fanout = NotificationFanout(delivery)

    await fanout.new_booking(
        "provider-1", "bk-1", UserRef(id="alice", name="Alice"), "svc-1", "Plumbing", "Tomorrow 9am",
    )

    (frame,) = delivery.frames_for("provider-1")
    assert frame.type == "new_booking_notification"
    assert frame.data.service.title == "Plumbing"
    assert frame.data.type == "new_booking"


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        (BookingStatus.ACCEPTED, NotificationType.BOOKING_ACCEPTED),
        (BookingStatus.IN_PROGRESS, NotificationType.BOOKING_IN_PROGRESS),
        (BookingStatus.COMPLETED, NotificationType.BOOKING_COMPLETED),
        (BookingStatus.CANCELLED, NotificationType.BOOKING_CANCELLED),
    ],
)
@pytest.mark.asyncio
async def test_booking_status_maps_to_notification_type(status, expected):
    delivery = RecordingDelivery()
    fanout = NotificationFanout(delivery)

    await fanout.booking_status_changed("alice", "bk-1", status, "svc-1", "Plumbing")

    (frame,) = delivery.frames_for("alice")
    assert frame.type == "booking_status_notification"
    assert frame.data.type == expected
    assert frame.data.status == status


@pytest.mark.asyncio
async def test_pending_booking_has_no_notification():
    fanout = NotificationFanout(RecordingDelivery())

    with pytest.raises(ValidationError):
        await fanout.booking_status_changed("alice", "bk-1", BookingStatus.PENDING, None, None)


@pytest.mark.asyncio
async def test_notification_removed_reaches_other_devices_only():
    manager = ConnectionManager(PresenceRegistry(), broadcast_presence=False)
    phone, laptop = make_connection("alice"), make_connection("alice")
    await manager.connect(phone)
    await manager.connect(laptop)
    fanout = NotificationFanout(manager)

    sent = await fanout.notification_removed("alice", "n-1", origin=phone.id)

    assert sent == 1
    assert phone.transport.frames() == []
    (frame,) = laptop.transport.frames("notification_removed")
    assert frame.data.notification_id == "n-1"
