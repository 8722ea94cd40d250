from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class UserSummaryResponse(BaseModel):
    id: int
    username: str | None
    profile_pic: str | None

    model_config = {"from_attributes": True}


class LastMessageResponse(BaseModel):
    id: UUID
    sender_id: int
    content: str
    created_at: datetime
    read: bool

    model_config = {"from_attributes": True}


class ConversationResponse(BaseModel):
    user: UserSummaryResponse
    last_message: LastMessageResponse
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int
