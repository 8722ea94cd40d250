from __future__ import annotations

from typing import Protocol

from social_chat.domain.events.message_persisted import MessagePersisted


class EventPublisher(Protocol):
    async def publish(self, event: MessagePersisted) -> None: ...
