from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class MessagePersisted:
    """Emitted by the write path once a message is committed. Carries ids only."""

    message_id: UUID
    sender_id: int
    recipient_id: int | None = None
    group_id: UUID | None = None
