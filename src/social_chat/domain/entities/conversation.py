from __future__ import annotations

from dataclasses import dataclass

from social_chat.domain.entities.message import Message
from social_chat.domain.entities.user import UserSummary


@dataclass(frozen=True, slots=True)
class Conversation:
    """Per-viewer summary of a direct exchange. Derived, never stored."""

    counterpart: UserSummary
    last_message: Message
    unread_count: int
