from __future__ import annotations

from typing import Iterable, Protocol

from social_chat.domain.entities.user import UserSummary


class UserReader(Protocol):
    async def get_summary(self, user_id: int) -> UserSummary | None: ...

    async def get_summaries(self, user_ids: Iterable[int]) -> dict[int, UserSummary]:
        """Public profile summaries keyed by id. Unknown ids are omitted."""
        ...
