"""Realtime notification of already-persisted messages.

The broadcaster never takes message content from the socket: it re-reads the
message by id and fans it out to inbox rooms. It holds no queue and never
retries; clients that miss an event re-fetch from the message store.
"""
from __future__ import annotations

import logging
from uuid import UUID

from social_chat.application.dto.principal import Principal
from social_chat.application.dto.realtime import Delivery, Emit, message_data
from social_chat.application.exceptions import ForbiddenError, NotFoundError
from social_chat.application.policies.permissions import assert_is_sender
from social_chat.application.realtime.registry import ConnectionRegistry
from social_chat.application.realtime.rooms import RoomTable, inbox_room
from social_chat.application.uow import UnitOfWork
from social_chat.domain.value_objects.enums import OutboundEvent

logger = logging.getLogger(__name__)


async def deliver(
    registry: ConnectionRegistry,
    rooms: RoomTable,
    principal: Principal,
    message_id: UUID,
    recipient_id: int | None,
    uow: UnitOfWork,
) -> Delivery:
    message = await uow.messages.get_by_id(message_id)
    if message is None:
        logger.debug("Message %s vanished before broadcast", message_id)
        raise NotFoundError("Message not found")
    assert_is_sender(principal, message)

    if message.group_id is not None:
        member_ids = [
            m for m in await uow.groups.list_member_ids(message.group_id)
            if m != message.sender_id
        ]
    else:
        if recipient_id is not None and recipient_id != message.recipient_id:
            raise ForbiddenError("recipientId does not match the message")
        member_ids = [message.recipient_id]  # type: ignore[list-item]

    recipient_online = any(registry.is_online(m) for m in member_ids)
    targets = rooms.connections_in(
        inbox_room(message.sender_id),
        *(inbox_room(m) for m in member_ids),
    )
    if not recipient_online:
        logger.debug("No live connection for recipients of %s", message_id)
    if not targets:
        return Delivery(effects=[], recipient_online=False)

    emit = Emit(targets, OutboundEvent.NEW_MESSAGE, message_data(message))
    return Delivery(effects=[emit], recipient_online=recipient_online)


def typing(
    rooms: RoomTable,
    sender_id: int,
    recipient_id: int,
    is_typing: bool,
) -> list[Emit]:
    """Fire-and-forget typing indicator to the recipient's inbox."""
    targets = rooms.connections_in(inbox_room(recipient_id))
    if not targets:
        return []
    return [
        Emit(
            targets,
            OutboundEvent.USER_TYPING,
            {"senderId": sender_id, "isTyping": is_typing},
        )
    ]
