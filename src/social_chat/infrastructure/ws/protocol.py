"""WebSocket frame envelopes and per-event payload models."""
from __future__ import annotations

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from social_chat.application.dto.realtime import (
    JoinChat,
    LeaveChat,
    RealtimeEvent,
    SendMessage,
    Typing,
)
from social_chat.application.exceptions import ValidationError
from social_chat.domain.value_objects.enums import InboundEvent


class WsInbound(BaseModel):
    """Client → Server."""

    type: str  # sendMessage | joinChat | leaveChat | typing | ping
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str  # newMessage | userTyping | userStatus | joinedChat | error | pong
    data: dict[str, Any] = {}


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SendMessagePayload(_Payload):
    message_id: UUID = Field(alias="messageId")
    recipient_id: int | None = Field(default=None, alias="recipientId")


class ChatPairPayload(_Payload):
    recipient_id: int = Field(alias="recipientId")
    user_id: int | None = Field(default=None, alias="userId")


class TypingPayload(_Payload):
    recipient_id: int = Field(alias="recipientId")
    is_typing: bool = Field(default=True, alias="isTyping")


def parse_event(frame: WsInbound) -> RealtimeEvent:
    """Turn a validated envelope into a typed event.

    Raises ValidationError for unknown types and malformed payloads.
    """
    try:
        if frame.type == InboundEvent.SEND_MESSAGE:
            p = SendMessagePayload.model_validate(frame.data)
            return SendMessage(message_id=p.message_id, recipient_id=p.recipient_id)
        if frame.type == InboundEvent.JOIN_CHAT:
            c = ChatPairPayload.model_validate(frame.data)
            return JoinChat(recipient_id=c.recipient_id, user_id=c.user_id)
        if frame.type == InboundEvent.LEAVE_CHAT:
            c = ChatPairPayload.model_validate(frame.data)
            return LeaveChat(recipient_id=c.recipient_id, user_id=c.user_id)
        if frame.type == InboundEvent.TYPING:
            t = TypingPayload.model_validate(frame.data)
            return Typing(recipient_id=t.recipient_id, is_typing=t.is_typing)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid {frame.type} payload: {exc.errors()[0]['msg']}") from exc
    raise ValidationError(f"Unknown event type {frame.type!r}")
