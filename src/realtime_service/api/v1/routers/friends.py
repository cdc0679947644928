from __future__ import annotations

from fastapi import APIRouter, status

from realtime_service.api.deps import CurrentPrincipal, UoWDep
from realtime_service.api.v1.schemas.friend import PendingCountResponse
from realtime_service.services import friend_request_service

router = APIRouter(prefix="/api/v1/friends/requests", tags=["friends"])


@router.get("/pending-count", response_model=PendingCountResponse)
async def get_pending_count(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> PendingCountResponse:
    count = await friend_request_service.get_pending_count(principal, uow)
    return PendingCountResponse(pending_count=count)


@router.post("/pending-count", response_model=PendingCountResponse)
async def increment_pending_count(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> PendingCountResponse:
    count = await friend_request_service.increment_pending_count(principal.user_id, uow)
    return PendingCountResponse(pending_count=count)


@router.delete("/pending-count", status_code=status.HTTP_204_NO_CONTENT)
async def reset_pending_count(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> None:
    await friend_request_service.reset_pending_count(principal, uow)
