from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from social_chat.domain.entities.message import Message
from social_chat.infrastructure.db.mappers import message as mapper
from social_chat.infrastructure.db.models.message import MessageModel, MessageReadModel


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, message_id: UUID) -> Message | None:
        # populate_existing: read receipts may have changed within this session.
        stmt = (
            select(MessageModel)
            .where(MessageModel.id == message_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_between(self, user_a: int, user_b: int) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(
                or_(
                    and_(MessageModel.sender_id == user_a, MessageModel.recipient_id == user_b),
                    and_(MessageModel.sender_id == user_b, MessageModel.recipient_id == user_a),
                )
            )
            .order_by(MessageModel.created_at.asc(), MessageModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_for_group(self, group_id: UUID) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(MessageModel.group_id == group_id)
            .order_by(MessageModel.created_at.asc(), MessageModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_direct_for_user(self, user_id: int) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(
                MessageModel.group_id.is_(None),
                or_(MessageModel.sender_id == user_id, MessageModel.recipient_id == user_id),
            )
            .order_by(MessageModel.created_at.desc(), MessageModel.id.desc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, message: Message) -> Message:
        model = mapper.entity_to_model(message)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def delete(self, message_id: UUID) -> None:
        await self._session.execute(delete(MessageModel).where(MessageModel.id == message_id))

    async def mark_read(self, message_id: UUID) -> None:
        stmt = update(MessageModel).where(MessageModel.id == message_id).values(read=True)
        await self._session.execute(stmt)

    async def add_read_receipt(
        self,
        message_id: UUID,
        user_id: int,
        read_at: datetime,
    ) -> None:
        stmt = (
            pg_insert(MessageReadModel)
            .values(message_id=message_id, user_id=user_id, read_at=read_at)
            .on_conflict_do_nothing(constraint="uq_message_read")
        )
        await self._session.execute(stmt)
