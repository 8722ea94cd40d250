from __future__ import annotations

from typing import Protocol
from uuid import UUID

from social_chat.domain.entities.group import Group


class GroupReader(Protocol):
    async def get_by_id(self, group_id: UUID) -> Group | None: ...

    async def is_member(self, group_id: UUID, user_id: int) -> bool: ...

    async def list_member_ids(self, group_id: UUID) -> list[int]: ...
