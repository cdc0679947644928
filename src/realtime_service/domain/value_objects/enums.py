from __future__ import annotations

from enum import StrEnum


class MessageType(StrEnum):
    TEXT = "text"
    ATTACHMENT = "attachment"


class BookingStatus(StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class NotificationType(StrEnum):
    MESSAGE = "message"
    FRIEND_REQUEST = "friend_request"
    FRIEND_ACCEPTED = "friend_accepted"
    NEW_BOOKING = "new_booking"
    BOOKING_ACCEPTED = "booking_accepted"
    BOOKING_IN_PROGRESS = "booking_in_progress"
    BOOKING_COMPLETED = "booking_completed"
    BOOKING_CANCELLED = "booking_cancelled"


BOOKING_NOTIFICATION_TYPES: dict[BookingStatus, NotificationType] = {
    BookingStatus.ACCEPTED: NotificationType.BOOKING_ACCEPTED,
    BookingStatus.IN_PROGRESS: NotificationType.BOOKING_IN_PROGRESS,
    BookingStatus.COMPLETED: NotificationType.BOOKING_COMPLETED,
    BookingStatus.CANCELLED: NotificationType.BOOKING_CANCELLED,
}
