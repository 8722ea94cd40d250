from __future__ import annotations

import logging
import uuid

from social_chat.application.dto.message import SendMessageDTO
from social_chat.application.dto.principal import Principal
from social_chat.application.exceptions import NotFoundError, ValidationError
from social_chat.application.policies.permissions import (
    assert_can_delete,
    assert_can_mark_read,
    assert_can_message_user,
    assert_can_view,
    assert_group_member,
)
from social_chat.application.ports.bus import EventPublisher
from social_chat.application.ports.clock import Clock, utc_now
from social_chat.application.uow import UnitOfWork
from social_chat.domain.entities.message import Message
from social_chat.domain.events.message_persisted import MessagePersisted
from social_chat.domain.value_objects.enums import MediaType

logger = logging.getLogger(__name__)

DEFAULT_MAX_LENGTH = 5000


def _validate(dto: SendMessageDTO, max_length: int) -> str:
    content = dto.content.strip() if dto.content else ""
    if not content:
        raise ValidationError("Message content must not be empty")
    if len(content) > max_length:
        raise ValidationError(f"Message content exceeds {max_length} characters")
    if dto.media_type != MediaType.NONE and not dto.media_url:
        raise ValidationError("media_url is required when media_type is set")
    return content


async def _announce(publisher: EventPublisher | None, message: Message) -> None:
    """Best-effort realtime push; the message is already committed."""
    if publisher is None:
        return
    try:
        await publisher.publish(
            MessagePersisted(
                message_id=message.id,
                sender_id=message.sender_id,
                recipient_id=message.recipient_id,
                group_id=message.group_id,
            )
        )
    except Exception:
        logger.warning("Could not announce message %s", message.id, exc_info=True)


async def send_to_user(
    principal: Principal,
    recipient_id: int,
    dto: SendMessageDTO,
    uow: UnitOfWork,
    *,
    publisher: EventPublisher | None = None,
    max_length: int = DEFAULT_MAX_LENGTH,
    now: Clock = utc_now,
) -> Message:
    content = _validate(dto, max_length)
    await assert_can_message_user(principal, recipient_id, uow.users)

    message = await uow.messages_w.create(
        Message(
            id=uuid.uuid4(),
            sender_id=principal.user_id,
            recipient_id=recipient_id,
            group_id=None,
            content=content,
            media_url=dto.media_url,
            media_type=dto.media_type.value,
            read=False,
            read_by=(),
            created_at=now(),
        )
    )
    await uow.commit()
    await _announce(publisher, message)
    return message


async def send_to_group(
    principal: Principal,
    group_id: uuid.UUID,
    dto: SendMessageDTO,
    uow: UnitOfWork,
    *,
    publisher: EventPublisher | None = None,
    max_length: int = DEFAULT_MAX_LENGTH,
    now: Clock = utc_now,
) -> Message:
    content = _validate(dto, max_length)
    await assert_group_member(principal, group_id, uow.groups)

    message = await uow.messages_w.create(
        Message(
            id=uuid.uuid4(),
            sender_id=principal.user_id,
            recipient_id=None,
            group_id=group_id,
            content=content,
            media_url=dto.media_url,
            media_type=dto.media_type.value,
            read=False,
            read_by=(),
            created_at=now(),
        )
    )
    await uow.commit()
    await _announce(publisher, message)
    return message


async def list_private_messages(
    principal: Principal,
    other_user_id: int,
    uow: UnitOfWork,
) -> list[Message]:
    if await uow.users.get_summary(other_user_id) is None:
        raise NotFoundError("User not found")
    return await uow.messages.list_between(principal.user_id, other_user_id)


async def list_group_messages(
    principal: Principal,
    group_id: uuid.UUID,
    uow: UnitOfWork,
) -> list[Message]:
    await assert_group_member(principal, group_id, uow.groups)
    return await uow.messages.list_for_group(group_id)


async def get_message(
    principal: Principal,
    message_id: uuid.UUID,
    uow: UnitOfWork,
) -> Message:
    message = await uow.messages.get_by_id(message_id)
    return await assert_can_view(principal, message, uow.groups)


async def delete_message(
    principal: Principal,
    message_id: uuid.UUID,
    uow: UnitOfWork,
) -> None:
    message = assert_can_delete(principal, await uow.messages.get_by_id(message_id))
    await uow.messages_w.delete(message.id)
    await uow.commit()
    logger.info("Message %s deleted by user %s", message.id, principal.user_id)


async def mark_read(
    principal: Principal,
    message_id: uuid.UUID,
    uow: UnitOfWork,
    *,
    now: Clock = utc_now,
) -> Message:
    """Direct: flip the read flag. Group: add the caller's read receipt.

    Both are idempotent.
    """
    message = await assert_can_mark_read(
        principal, await uow.messages.get_by_id(message_id), uow.groups,
    )

    if message.is_group:
        if message.is_read_by(principal.user_id):
            return message
        await uow.messages_w.add_read_receipt(message.id, principal.user_id, now())
    else:
        if message.read:
            return message
        await uow.messages_w.mark_read(message.id)
    await uow.commit()

    updated = await uow.messages.get_by_id(message.id)
    if updated is None:
        raise NotFoundError("Message not found")
    return updated
