from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from realtime_service.domain.entities.conversation import Conversation
from realtime_service.infrastructure.db.mappers import conversation as mapper
from realtime_service.infrastructure.db.models.conversation import ConversationModel
from realtime_service.infrastructure.db.repositories._cursor import decode_cursor


class ConversationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        result = await self._session.get(ConversationModel, conversation_id)
        return mapper.model_to_entity(result) if result else None

    async def get_by_members(self, member_low: str, member_high: str) -> Conversation | None:
        stmt = select(ConversationModel).where(
            ConversationModel.member_low == member_low,
            ConversationModel.member_high == member_high,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_for_user(
        self,
        user_id: str,
        *,
        cursor: str | None = None,
        limit: int = 20,
    ) -> list[Conversation]:
        stmt = (
            select(ConversationModel)
            .where(
                or_(
                    ConversationModel.member_low == user_id,
                    ConversationModel.member_high == user_id,
                )
            )
            .order_by(ConversationModel.updated_at.desc(), ConversationModel.id)
            .limit(limit)
        )
        if cursor:
            ts, cid = decode_cursor(cursor)
            stmt = stmt.where(
                (ConversationModel.updated_at < ts)
                | (
                    (ConversationModel.updated_at == ts)
                    & (ConversationModel.id > cid)
                )
            )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class ConversationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_if_not_exists(self, conversation: Conversation) -> tuple[Conversation, bool]:
        """Insert on the member pair. Concurrent creators converge on one row."""
        stmt = (
            pg_insert(ConversationModel)
            .values(**mapper.entity_to_values(conversation))
            .on_conflict_do_nothing(constraint="uq_conversation_pair")
            .returning(ConversationModel)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is not None:
            return mapper.model_to_entity(row), True

        existing = await ConversationReaderRepo(self._session).get_by_members(
            conversation.member_low, conversation.member_high,
        )
        assert existing is not None
        return existing, False

    async def touch_latest_message(
        self,
        conversation_id: UUID,
        message_id: UUID,
        text: str | None,
        ts: datetime,
    ) -> None:
        stmt = (
            update(ConversationModel)
            .where(ConversationModel.id == conversation_id)
            .values(
                latest_message_id=message_id,
                latest_message_text=text,
                last_message_at=ts,
                updated_at=ts,
            )
        )
        await self._session.execute(stmt)
