from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from realtime_service.api.deps import get_verifier
from realtime_service.application.dto.principal import Principal
from realtime_service.application.dto.relay import RelayedMessage, UserRef
from realtime_service.config import settings
from realtime_service.domain.entities.connection import Connection
from realtime_service.infrastructure.ws.protocol import (
    AddUserFrame,
    ErrorData,
    ErrorFrame,
    InboundFrame,
    MessageSentData,
    MessageSentFrame,
    PingFrame,
    PongFrame,
    ProtocolError,
    RemoveNotificationFrame,
    SendMessageFrame,
    TypingStartFrame,
    TypingStopFrame,
    decode_inbound,
    encode_frame,
)
from realtime_service.services.realtime_hub import RealtimeHub

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

AUTH_FAILED_CLOSE_CODE = 4001


async def _authenticate(token: str) -> Principal | None:
    try:
        verifier = get_verifier()
        return await verifier.verify(token)
    except Exception:
        logger.debug("WS auth failed", exc_info=True)
        return None


@router.websocket("/ws")
async def ws_live(
    websocket: WebSocket,
    token: str = Query(...),
) -> None:
    principal = await _authenticate(token)
    if principal is None:
        await websocket.close(code=AUTH_FAILED_CLOSE_CODE, reason="Authentication failed")
        return

    hub: RealtimeHub = websocket.app.state.hub
    await websocket.accept()
    connection = Connection(
        user_id=principal.user_id,
        transport=websocket,
        name=principal.name,
        avatar=principal.avatar,
    )
    await hub.manager.connect(connection)

    heartbeat_task = asyncio.create_task(
        _heartbeat(websocket), name=f"ws-heartbeat-{connection.id}",
    )
    try:
        await _read_loop(websocket, hub, connection, principal)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s/%s", principal.user_id, connection.id)
    finally:
        heartbeat_task.cancel()
        await hub.manager.disconnect(connection)


async def _heartbeat(ws: WebSocket) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    try:
        while True:
            await asyncio.sleep(interval)
            await ws.send_text(encode_frame(PongFrame()))
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.debug("WS heartbeat stopped", exc_info=True)


async def _read_loop(
    ws: WebSocket,
    hub: RealtimeHub,
    connection: Connection,
    principal: Principal,
) -> None:
    while True:
        raw = await ws.receive_text()
        try:
            frame = decode_inbound(raw)
        except ProtocolError as exc:
            await hub.manager.send_to_connection(
                connection,
                ErrorFrame(data=ErrorData(code=exc.code, detail=exc.detail or None, type=exc.event_type)),
            )
            continue
        await _dispatch(frame, hub, connection, principal)


async def _dispatch(
    frame: InboundFrame,
    hub: RealtimeHub,
    connection: Connection,
    principal: Principal,
) -> None:
    if isinstance(frame, PingFrame):
        await hub.manager.send_to_connection(connection, PongFrame())

    elif isinstance(frame, AddUserFrame):
        if _acting_user_mismatch(frame.data.user_id, principal, frame.type):
            return
        # reconnecting clients re-announce themselves; registration is idempotent
        await hub.manager.connect(connection)

    elif isinstance(frame, SendMessageFrame):
        await _handle_send(frame, hub, connection, principal)

    elif isinstance(frame, TypingStartFrame):
        if _acting_user_mismatch(frame.data.user_id, principal, frame.type):
            return
        await hub.typing.on_typing_start(principal.user_id, frame.data.target_user_id, connection)

    elif isinstance(frame, TypingStopFrame):
        if _acting_user_mismatch(frame.data.user_id, principal, frame.type):
            return
        await hub.typing.on_typing_stop(principal.user_id, frame.data.target_user_id, connection)

    elif isinstance(frame, RemoveNotificationFrame):
        if _acting_user_mismatch(frame.data.user_id, principal, frame.type):
            return
        await hub.notifications.notification_removed(
            principal.user_id, frame.data.notification_id, origin=connection.id,
        )


def _acting_user_mismatch(claimed: str, principal: Principal, event_type: str) -> bool:
    if claimed == principal.user_id:
        return False
    logger.warning(
        "Ignoring %s: payload user %s is not the connected user %s",
        event_type, claimed, principal.user_id,
    )
    return True


async def _handle_send(
    frame: SendMessageFrame,
    hub: RealtimeHub,
    connection: Connection,
    principal: Principal,
) -> None:
    data = frame.data
    if data.sender_id != principal.user_id:
        logger.warning(
            "send_message senderId %s differs from connected user %s, using the latter",
            data.sender_id, principal.user_id,
        )
    message = RelayedMessage(
        conversation_id=data.conversation_id,
        sender=UserRef(id=principal.user_id, name=principal.name, avatar=principal.avatar),
        text=data.text,
        created_at=datetime.now(timezone.utc),
        client_msg_id=data.client_msg_id,
        file_url=data.file_url,
        file_name=data.file_name,
        file_type=data.file_type,
    )
    await hub.relay.relay(message, [data.receiver_id], origin=connection.id)
    await hub.manager.send_to_connection(
        connection,
        MessageSentFrame(
            data=MessageSentData(temp_id=data.temp_id, client_msg_id=data.client_msg_id),
        ),
    )
