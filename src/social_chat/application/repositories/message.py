from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from social_chat.domain.entities.message import Message


class MessageReader(Protocol):
    async def get_by_id(self, message_id: UUID) -> Message | None: ...

    async def list_between(self, user_a: int, user_b: int) -> list[Message]:
        """Direct messages exchanged by the pair, oldest first."""
        ...

    async def list_for_group(self, group_id: UUID) -> list[Message]:
        """Group messages, oldest first."""
        ...

    async def list_direct_for_user(self, user_id: int) -> list[Message]:
        """Direct messages sent or received by user_id, newest first."""
        ...


class MessageWriter(Protocol):
    async def create(self, message: Message) -> Message: ...

    async def delete(self, message_id: UUID) -> None: ...

    async def mark_read(self, message_id: UUID) -> None: ...

    async def add_read_receipt(
        self, message_id: UUID, user_id: int, read_at: datetime
    ) -> None:
        """Record a group read receipt. No-op if the user already has one."""
        ...
