from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from realtime_service.api.deps import CurrentPrincipal, UoWDep
from realtime_service.api.v1.schemas.conversation import (
    ConversationResponse,
    CreateConversationRequest,
)
from realtime_service.infrastructure.db.repositories._cursor import encode_cursor
from realtime_service.services import conversation_service

router = APIRouter(prefix="/api/v1/chat/conversations", tags=["conversations"])

NEXT_CURSOR_HEADER = "X-Next-Cursor"


@router.post("", response_model=ConversationResponse)
async def create_conversation(
    body: CreateConversationRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    response: Response,
) -> ConversationResponse:
    conv, created = await conversation_service.get_or_create_direct_conversation(
        principal, body.receiver_id, uow,
    )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return ConversationResponse.from_entity(conv)


@router.get("", response_model=list[ConversationResponse])
async def list_conversations(
    principal: CurrentPrincipal,
    uow: UoWDep,
    response: Response,
    cursor: str | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
) -> list[ConversationResponse]:
    convs = await conversation_service.list_user_conversations(
        principal, cursor, limit, uow,
    )
    if len(convs) == limit:
        last = convs[-1]
        response.headers[NEXT_CURSOR_HEADER] = encode_cursor(last.updated_at, last.id)
    return [ConversationResponse.from_entity(c) for c in convs]


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ConversationResponse:
    conv = await conversation_service.get_conversation(conversation_id, principal, uow)
    return ConversationResponse.from_entity(conv)
