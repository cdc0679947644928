from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from realtime_service.infrastructure.db.models.friend_request import FriendRequestCounterModel


class FriendRequestCounterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: str) -> int:
        stmt = select(FriendRequestCounterModel.pending_count).where(
            FriendRequestCounterModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() or 0

    async def increment(self, user_id: str, by: int = 1) -> int:
        stmt = (
            pg_insert(FriendRequestCounterModel)
            .values(user_id=user_id, pending_count=by)
            .on_conflict_do_update(
                index_elements=[FriendRequestCounterModel.user_id],
                set_={"pending_count": FriendRequestCounterModel.pending_count + by},
            )
            .returning(FriendRequestCounterModel.pending_count)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def reset(self, user_id: str) -> None:
        stmt = (
            update(FriendRequestCounterModel)
            .where(FriendRequestCounterModel.user_id == user_id)
            .values(pending_count=0)
        )
        await self._session.execute(stmt)
