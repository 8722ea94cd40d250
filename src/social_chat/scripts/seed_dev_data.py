"""Seed development data: creates the schema, sample users, a group and messages."""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone

from social_chat.domain.entities.message import Message
from social_chat.domain.value_objects.enums import MediaType
from social_chat.infrastructure.db.base import Base
from social_chat.infrastructure.db.models import GroupMemberModel, GroupModel, UserModel
from social_chat.infrastructure.db.session import AsyncSessionLocal, engine
from social_chat.infrastructure.db.uow import SqlAlchemyUoW
from social_chat.logging_config import configure_logging

logger = logging.getLogger(__name__)

USERS = [(1, "alice"), (2, "bob"), (3, "carol")]


def _message(sender_id: int, content: str, at: datetime, *, recipient_id=None, group_id=None) -> Message:
    return Message(
        id=uuid.uuid4(),
        sender_id=sender_id,
        recipient_id=recipient_id,
        group_id=group_id,
        content=content,
        media_url=None,
        media_type=MediaType.NONE.value,
        read=False,
        read_by=(),
        created_at=at,
    )


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        now = datetime.now(timezone.utc)

        session.add_all([UserModel(id=uid, username=name) for uid, name in USERS])
        group_id = uuid.uuid4()
        session.add(GroupModel(id=group_id, name="weekend plans", created_by=1, created_at=now))
        session.add_all([GroupMemberModel(group_id=group_id, user_id=uid) for uid, _ in USERS])
        await uow.flush()

        messages = [
            _message(1, "Hey Bob!", now, recipient_id=2),
            _message(2, "Hi Alice, what's up?", now + timedelta(seconds=5), recipient_id=1),
            _message(3, "Are we still on for Saturday?", now + timedelta(seconds=10), recipient_id=1),
            _message(1, "Saturday at noon?", now + timedelta(seconds=15), group_id=group_id),
        ]
        for msg in messages:
            await uow.messages_w.create(msg)

        await uow.commit()
        logger.info("Seeded %d users, group %s and %d messages", len(USERS), group_id, len(messages))


def main() -> None:
    configure_logging("INFO")
    asyncio.run(seed())


if __name__ == "__main__":
    main()
