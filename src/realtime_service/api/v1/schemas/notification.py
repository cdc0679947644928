"""Domain events other marketplace subsystems hand to the notification fan-out."""
from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel
from pydantic.alias_generators import to_camel

from realtime_service.domain.value_objects.enums import BookingStatus


class _EventModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserRefIn(_EventModel):
    id: str = Field(min_length=1)
    name: str | None = None
    avatar: str | None = None


class FriendRequestSentEvent(_EventModel):
    event: Literal["friend_request_sent"]
    recipient_id: str
    request_id: str
    requester: UserRefIn


class FriendRequestAcceptedEvent(_EventModel):
    event: Literal["friend_request_accepted"]
    requester_id: str
    request_id: str
    new_friend: UserRefIn


class NewBookingEvent(_EventModel):
    event: Literal["new_booking"]
    provider_id: str
    booking_id: str
    customer: UserRefIn
    service_id: str | None = None
    service_title: str | None = None
    message: str | None = None


class BookingStatusEvent(_EventModel):
    event: Literal["booking_status_changed"]
    customer_id: str
    booking_id: str
    status: BookingStatus
    service_id: str | None = None
    service_title: str | None = None
    message: str | None = None
    customer: UserRefIn | None = None


DomainEvent = Annotated[
    Union[FriendRequestSentEvent, FriendRequestAcceptedEvent, NewBookingEvent, BookingStatusEvent],
    Field(discriminator="event"),
]


class DomainEventRequest(RootModel[DomainEvent]):
    pass


class NotificationAccepted(_EventModel):
    notification_id: str
