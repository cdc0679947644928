from __future__ import annotations

from realtime_service.application.dto.principal import Principal
from realtime_service.application.uow import UnitOfWork


async def get_pending_count(principal: Principal, uow: UnitOfWork) -> int:
    return await uow.friend_requests.get(principal.user_id)


async def increment_pending_count(user_id: str, uow: UnitOfWork) -> int:
    count = await uow.friend_requests.increment(user_id)
    await uow.commit()
    return count


async def reset_pending_count(principal: Principal, uow: UnitOfWork) -> None:
    await uow.friend_requests.reset(principal.user_id)
    await uow.commit()
