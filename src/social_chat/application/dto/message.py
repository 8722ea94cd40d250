from __future__ import annotations

from dataclasses import dataclass

from social_chat.domain.value_objects.enums import MediaType


@dataclass(frozen=True, slots=True)
class SendMessageDTO:
    content: str
    media_url: str | None = None
    media_type: MediaType = MediaType.NONE
