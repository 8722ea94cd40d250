from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from social_chat.domain.value_objects.enums import MediaType


@dataclass(frozen=True, slots=True)
class ReadReceipt:
    user_id: int
    read_at: datetime


@dataclass(frozen=True, slots=True)
class Message:
    """A direct or group message. Exactly one of recipient_id / group_id is set."""

    id: UUID
    sender_id: int
    recipient_id: int | None
    group_id: UUID | None
    content: str
    media_url: str | None
    media_type: str
    read: bool
    read_by: tuple[ReadReceipt, ...]
    created_at: datetime

    def __post_init__(self) -> None:
        if (self.recipient_id is None) == (self.group_id is None):
            raise ValueError("Message needs exactly one of recipient_id or group_id")

    @property
    def is_group(self) -> bool:
        return self.group_id is not None

    @property
    def has_media(self) -> bool:
        return self.media_type != MediaType.NONE and self.media_url is not None

    def counterpart_of(self, user_id: int) -> int | None:
        """Other side of a direct message as seen by user_id."""
        if self.is_group:
            return None
        if self.sender_id == user_id:
            return self.recipient_id
        if self.recipient_id == user_id:
            return self.sender_id
        return None

    def is_read_by(self, user_id: int) -> bool:
        return any(r.user_id == user_id for r in self.read_by)
