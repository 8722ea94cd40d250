from __future__ import annotations

from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from social_chat.domain.entities.group import Group
from social_chat.infrastructure.db.mappers import group as mapper
from social_chat.infrastructure.db.models.group import GroupMemberModel, GroupModel


class GroupReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, group_id: UUID) -> Group | None:
        model = await self._session.get(GroupModel, group_id)
        return mapper.model_to_entity(model) if model else None

    async def is_member(self, group_id: UUID, user_id: int) -> bool:
        stmt = select(
            exists().where(
                GroupMemberModel.group_id == group_id,
                GroupMemberModel.user_id == user_id,
            )
        )
        result = await self._session.execute(stmt)
        return bool(result.scalar())

    async def list_member_ids(self, group_id: UUID) -> list[int]:
        stmt = (
            select(GroupMemberModel.user_id)
            .where(GroupMemberModel.group_id == group_id)
            .order_by(GroupMemberModel.joined_at)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
