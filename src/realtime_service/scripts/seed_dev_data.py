"""Seed development data: a few direct conversations with short histories."""
from __future__ import annotations

import asyncio
import logging
import uuid

from realtime_service.application.dto.message import SendMessageDTO
from realtime_service.application.dto.principal import Principal
from realtime_service.application.uow import UnitOfWork
from realtime_service.services import conversation_service, message_service

logger = logging.getLogger(__name__)

SAMPLE_THREADS: list[tuple[str, str, list[tuple[str, str]]]] = [
    (
        "customer-1",
        "provider-1",
        [
            ("customer-1", "Hi! Are you free to fix a leaking tap on Saturday?"),
            ("provider-1", "Yes, morning works. What's the address?"),
            ("customer-1", "12 Elm Street, flat 3."),
        ],
    ),
    (
        "customer-2",
        "provider-1",
        [
            ("customer-2", "Could you send a quote for garden cleanup?"),
        ],
    ),
]


async def seed(uow: UnitOfWork) -> int:
    """Create the sample threads. Returns the number of new messages."""
    created_messages = 0
    for user_a, user_b, lines in SAMPLE_THREADS:
        conv, _ = await conversation_service.get_or_create_direct_conversation(
            Principal(user_id=user_a), user_b, uow,
        )
        for sender_id, text in lines:
            # deterministic ids keep re-runs idempotent
            client_msg_id = uuid.uuid5(conv.id, f"{sender_id}:{text}")
            _, created = await message_service.send_message(
                Principal(user_id=sender_id),
                SendMessageDTO(conversation_id=conv.id, client_msg_id=client_msg_id, text=text),
                uow,
            )
            created_messages += int(created)
        logger.info("Seeded conversation %s between %s and %s", conv.id, user_a, user_b)
    return created_messages


async def _run() -> None:
    from realtime_service.infrastructure.db.session import AsyncSessionLocal, create_tables
    from realtime_service.infrastructure.db.uow import SqlAlchemyUoW

    await create_tables()
    async with AsyncSessionLocal() as session:
        count = await seed(SqlAlchemyUoW(session))
    logger.info("Seeded %d new messages", count)


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_run())


if __name__ == "__main__":
    main()
