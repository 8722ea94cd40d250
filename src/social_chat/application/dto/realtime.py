"""Inbound realtime events and the outbound effects handlers produce."""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Union
from uuid import UUID

from social_chat.domain.entities.message import Message
from social_chat.domain.value_objects.enums import OutboundEvent


@dataclass(frozen=True, slots=True)
class SendMessage:
    message_id: UUID
    recipient_id: int | None = None


@dataclass(frozen=True, slots=True)
class JoinChat:
    recipient_id: int
    user_id: int | None = None


@dataclass(frozen=True, slots=True)
class LeaveChat:
    recipient_id: int
    user_id: int | None = None


@dataclass(frozen=True, slots=True)
class Typing:
    recipient_id: int
    is_typing: bool


@dataclass(frozen=True, slots=True)
class Disconnect:
    reason: str = "closed"


RealtimeEvent = Union[SendMessage, JoinChat, LeaveChat, Typing, Disconnect]


@dataclass(frozen=True, slots=True)
class Emit:
    """Send one outbound frame to each listed connection."""

    connection_ids: tuple[str, ...]
    event: OutboundEvent
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Delivery:
    effects: list[Emit]
    # False is the "unavailable" signal: nothing reached the recipient side.
    recipient_online: bool


def error_to(connection_id: str, detail: str) -> Emit:
    return Emit((connection_id,), OutboundEvent.ERROR, {"message": detail})


def message_data(message: Message) -> dict[str, Any]:
    data = dataclasses.asdict(message)
    data["read_by"] = [dataclasses.asdict(r) for r in message.read_by]
    return data
