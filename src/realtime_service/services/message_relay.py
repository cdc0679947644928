"""Best-effort live delivery of messages that the REST path persists."""
from __future__ import annotations

import logging
from collections.abc import Iterable

from realtime_service.application.dto.relay import RelayedMessage
from realtime_service.application.ports.delivery import LiveDelivery
from realtime_service.infrastructure.ws.protocol import (
    GetMessageData,
    GetMessageFrame,
    UserSummary,
)

logger = logging.getLogger(__name__)


def build_get_message(message: RelayedMessage) -> GetMessageFrame:
    return GetMessageFrame(
        data=GetMessageData(
            id=message.id,
            conversation=message.conversation_id,
            sender=UserSummary(
                id=message.sender.id,
                name=message.sender.name,
                avatar=message.sender.avatar,
            ),
            text=message.text,
            client_msg_id=message.client_msg_id,
            created_at=message.created_at,
            file_url=message.file_url,
            file_name=message.file_name,
            file_type=message.file_type,
        ),
    )


class MessageRelay:
    """At-most-once push of one message to its recipients' live connections.

    No retry and no queue: an offline recipient finds the message on its next
    history fetch. Callers invoke ``relay`` once per message.
    """

    def __init__(self, delivery: LiveDelivery, *, self_echo: bool = False) -> None:
        self._delivery = delivery
        self._self_echo = self_echo

    async def relay(
        self,
        message: RelayedMessage,
        recipients: Iterable[str],
        *,
        origin: str | None = None,
    ) -> int:
        """Push ``get_message`` to every live connection of each recipient.

        ``origin`` is the sender's connection id; with self-echo enabled the
        sender's other connections receive the message too.
        """
        frame = build_get_message(message)
        sender_id = message.sender.id
        pushed = 0
        for user_id in dict.fromkeys(recipients):
            if user_id == sender_id:
                continue
            pushed += await self._delivery.send_to_user(user_id, frame)
        if self._self_echo:
            pushed += await self._delivery.send_to_user(sender_id, frame, exclude=origin)
        logger.debug(
            "Relayed message %s in %s from %s (pushes=%d)",
            message.id or message.client_msg_id, message.conversation_id, sender_id, pushed,
        )
        return pushed
