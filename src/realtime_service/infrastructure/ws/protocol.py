"""WebSocket message envelope models.

Every frame is ``{"type": <event name>, "data": <payload>}``. Payload keys are
camelCase on the wire. Both directions are closed unions discriminated by
``type`` so handlers can dispatch exhaustively.
"""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from realtime_service.domain.value_objects.enums import BookingStatus, NotificationType


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class WsInbound(BaseModel):
    """Untyped envelope, used to tell an unknown event from a malformed one."""

    type: str
    data: Any = None


class ProtocolError(Exception):
    def __init__(self, code: str, detail: str = "", event_type: str | None = None) -> None:
        self.code = code
        self.detail = detail
        self.event_type = event_type
        super().__init__(f"{code}: {detail}")


# --- shared payload parts -------------------------------------------------


class UserSummary(WireModel):
    id: str = Field(alias="_id")
    name: str | None = None
    avatar: str | None = None


class ServiceSummary(WireModel):
    id: str | None = Field(default=None, alias="_id")
    title: str | None = None


class EmptyData(WireModel):
    pass


# --- client → server ------------------------------------------------------


class AddUserData(WireModel):
    user_id: str


class SendMessageData(WireModel):
    sender_id: str
    receiver_id: str
    conversation_id: str
    text: str | None = None
    temp_id: str | int | None = None
    client_msg_id: str | None = None
    file_url: str | None = None
    file_name: str | None = None
    file_type: str | None = None

    @model_validator(mode="after")
    def _has_content(self) -> SendMessageData:
        if not (self.text and self.text.strip()) and not self.file_url:
            raise ValueError("message needs text or fileUrl")
        return self


class TypingData(WireModel):
    user_id: str
    target_user_id: str


class RemoveNotificationData(WireModel):
    notification_id: str
    user_id: str


class AddUserFrame(WireModel):
    type: Literal["add_user"] = "add_user"
    data: AddUserData


class SendMessageFrame(WireModel):
    type: Literal["send_message"] = "send_message"
    data: SendMessageData


class TypingStartFrame(WireModel):
    type: Literal["typing_start"] = "typing_start"
    data: TypingData


class TypingStopFrame(WireModel):
    type: Literal["typing_stop"] = "typing_stop"
    data: TypingData


class RemoveNotificationFrame(WireModel):
    type: Literal["remove_notification"] = "remove_notification"
    data: RemoveNotificationData


class PingFrame(WireModel):
    type: Literal["ping"] = "ping"
    data: EmptyData = Field(default_factory=EmptyData)


InboundFrame = Annotated[
    Union[
        AddUserFrame,
        SendMessageFrame,
        TypingStartFrame,
        TypingStopFrame,
        RemoveNotificationFrame,
        PingFrame,
    ],
    Field(discriminator="type"),
]

INBOUND_TYPES = frozenset(
    {"add_user", "send_message", "typing_start", "typing_stop", "remove_notification", "ping"}
)

inbound_adapter: TypeAdapter[InboundFrame] = TypeAdapter(InboundFrame)


# --- server → client ------------------------------------------------------


class OnlineUser(WireModel):
    user_id: str


class GetMessageData(WireModel):
    id: str | None = Field(default=None, alias="_id")
    conversation: str
    sender: UserSummary
    text: str | None = None
    client_msg_id: str | None = None
    created_at: datetime
    file_url: str | None = None
    file_name: str | None = None
    file_type: str | None = None


class MessageSentData(WireModel):
    temp_id: str | int | None = None
    client_msg_id: str | None = None
    message_id: str | None = None


class UserTypingData(WireModel):
    user_id: str
    is_typing: bool


class FriendRequestSentData(WireModel):
    notification_id: str
    request_id: str
    recipient_id: str
    requester: UserSummary


class FriendRequestAcceptedData(WireModel):
    notification_id: str
    request_id: str
    requester_id: str
    new_friend: UserSummary


class NewBookingData(WireModel):
    notification_id: str
    booking_id: str
    customer: UserSummary
    service: ServiceSummary
    message: str | None = None
    type: Literal["new_booking"] = "new_booking"


class BookingStatusData(WireModel):
    notification_id: str
    booking_id: str
    status: BookingStatus
    type: NotificationType
    service: ServiceSummary
    customer: UserSummary | None = None
    message: str | None = None


class NotificationRemovedData(WireModel):
    notification_id: str


class ErrorData(WireModel):
    code: str
    detail: str | None = None
    type: str | None = None


class GetUsersFrame(WireModel):
    type: Literal["get_users"] = "get_users"
    data: list[OnlineUser]


class GetMessageFrame(WireModel):
    type: Literal["get_message"] = "get_message"
    data: GetMessageData


class MessageSentFrame(WireModel):
    type: Literal["message_sent"] = "message_sent"
    data: MessageSentData


class UserTypingFrame(WireModel):
    type: Literal["user_typing"] = "user_typing"
    data: UserTypingData


class FriendRequestSentFrame(WireModel):
    type: Literal["friend_request_sent"] = "friend_request_sent"
    data: FriendRequestSentData


class FriendRequestAcceptedFrame(WireModel):
    type: Literal["friend_request_accepted"] = "friend_request_accepted"
    data: FriendRequestAcceptedData


class NewBookingFrame(WireModel):
    type: Literal["new_booking_notification"] = "new_booking_notification"
    data: NewBookingData


class BookingStatusFrame(WireModel):
    type: Literal["booking_status_notification"] = "booking_status_notification"
    data: BookingStatusData


class NotificationRemovedFrame(WireModel):
    type: Literal["notification_removed"] = "notification_removed"
    data: NotificationRemovedData


class PongFrame(WireModel):
    type: Literal["pong"] = "pong"
    data: EmptyData = Field(default_factory=EmptyData)


class ErrorFrame(WireModel):
    type: Literal["error"] = "error"
    data: ErrorData


OutboundFrame = Annotated[
    Union[
        GetUsersFrame,
        GetMessageFrame,
        MessageSentFrame,
        UserTypingFrame,
        FriendRequestSentFrame,
        FriendRequestAcceptedFrame,
        NewBookingFrame,
        BookingStatusFrame,
        NotificationRemovedFrame,
        PongFrame,
        ErrorFrame,
    ],
    Field(discriminator="type"),
]

outbound_adapter: TypeAdapter[OutboundFrame] = TypeAdapter(OutboundFrame)


def encode_frame(frame: WireModel) -> str:
    return frame.model_dump_json(by_alias=True)


def decode_inbound(raw: str | bytes) -> InboundFrame:
    """Parse a client frame, raising ProtocolError with a wire error code."""
    try:
        envelope = WsInbound.model_validate_json(raw)
    except PydanticValidationError as exc:
        raise ProtocolError("invalid_payload", str(exc)) from exc
    if envelope.type not in INBOUND_TYPES:
        raise ProtocolError("unknown_type", event_type=envelope.type)
    try:
        return inbound_adapter.validate_json(raw)
    except PydanticValidationError as exc:
        raise ProtocolError("invalid_payload", str(exc), envelope.type) from exc


def decode_outbound(raw: str | bytes | dict[str, Any]) -> OutboundFrame:
    if isinstance(raw, dict):
        return outbound_adapter.validate_python(raw)
    return outbound_adapter.validate_json(raw)
