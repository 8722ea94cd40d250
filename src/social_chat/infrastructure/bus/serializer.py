from __future__ import annotations

import json
from typing import Any
from uuid import UUID

from social_chat.domain.events.message_persisted import MessagePersisted

EVENT_MESSAGE_PERSISTED = "message.persisted"


def serialize_event(event: MessagePersisted) -> str:
    data: dict[str, Any] = {
        "message_id": str(event.message_id),
        "sender_id": event.sender_id,
        "recipient_id": event.recipient_id,
        "group_id": str(event.group_id) if event.group_id else None,
    }
    return json.dumps({"event": EVENT_MESSAGE_PERSISTED, "data": data})


def deserialize_event(raw: str | bytes) -> MessagePersisted:
    """Parse an envelope; raises ValueError for anything but message.persisted."""
    envelope = json.loads(raw)
    if envelope.get("event") != EVENT_MESSAGE_PERSISTED:
        raise ValueError(f"Unexpected event {envelope.get('event')!r}")
    data = envelope["data"]
    return MessagePersisted(
        message_id=UUID(data["message_id"]),
        sender_id=int(data["sender_id"]),
        recipient_id=int(data["recipient_id"]) if data.get("recipient_id") is not None else None,
        group_id=UUID(data["group_id"]) if data.get("group_id") else None,
    )
