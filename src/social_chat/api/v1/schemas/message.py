from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from social_chat.domain.value_objects.enums import MediaType


class SendMessageRequest(BaseModel):
    content: str = Field(min_length=1)
    media_url: str | None = None
    media_type: MediaType = MediaType.NONE


class ReadReceiptResponse(BaseModel):
    user_id: int
    read_at: datetime

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    id: UUID
    sender_id: int
    recipient_id: int | None
    group_id: UUID | None
    content: str
    media_url: str | None
    media_type: str
    read: bool
    read_by: list[ReadReceiptResponse]
    created_at: datetime

    model_config = {"from_attributes": True}
