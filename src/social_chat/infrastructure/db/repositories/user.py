from __future__ import annotations

from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from social_chat.domain.entities.user import UserSummary
from social_chat.infrastructure.db.mappers.user import model_to_summary
from social_chat.infrastructure.db.models.user import UserModel


class UserReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_summary(self, user_id: int) -> UserSummary | None:
        model = await self._session.get(UserModel, user_id)
        return model_to_summary(model) if model else None

    async def get_summaries(self, user_ids: Iterable[int]) -> dict[int, UserSummary]:
        ids = set(user_ids)
        if not ids:
            return {}
        result = await self._session.execute(select(UserModel).where(UserModel.id.in_(ids)))
        return {m.id: model_to_summary(m) for m in result.scalars().all()}
