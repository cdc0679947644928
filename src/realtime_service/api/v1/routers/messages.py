from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, Response

from realtime_service.api.deps import CurrentPrincipal, UoWDep
from realtime_service.api.v1.routers.conversations import NEXT_CURSOR_HEADER
from realtime_service.api.v1.schemas.message import MessageResponse, SendMessageRequest
from realtime_service.application.dto.message import SendMessageDTO
from realtime_service.infrastructure.db.repositories._cursor import encode_cursor
from realtime_service.services import message_service

router = APIRouter(prefix="/api/v1/chat/conversations", tags=["messages"])


@router.get("/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    response: Response,
    cursor: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
) -> list[MessageResponse]:
    messages = await message_service.list_messages(
        conversation_id, principal, cursor, limit, uow,
    )
    if len(messages) == limit:
        last = messages[-1]
        response.headers[NEXT_CURSOR_HEADER] = encode_cursor(last.created_at, last.id)
    return [MessageResponse.model_validate(m) for m in messages]


@router.post("/{conversation_id}/messages", response_model=MessageResponse, status_code=201)
async def send_message(
    conversation_id: UUID,
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MessageResponse:
    dto = SendMessageDTO(
        conversation_id=conversation_id,
        client_msg_id=body.client_msg_id,
        type=body.type,
        text=body.text,
        file_url=body.file_url,
        file_name=body.file_name,
        file_type=body.file_type,
    )
    msg, _created = await message_service.send_message(principal, dto, uow)
    return MessageResponse.model_validate(msg)
