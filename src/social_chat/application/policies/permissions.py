from __future__ import annotations

from uuid import UUID

from social_chat.application.dto.principal import Principal
from social_chat.application.exceptions import ForbiddenError, NotFoundError
from social_chat.application.repositories.group import GroupReader
from social_chat.application.repositories.user import UserReader
from social_chat.domain.entities.group import Group
from social_chat.domain.entities.message import Message
from social_chat.domain.entities.user import UserSummary


async def assert_can_message_user(
    principal: Principal,
    recipient_id: int,
    users: UserReader,
) -> UserSummary:
    """Raise unless recipient exists and is someone other than the caller."""
    recipient = await users.get_summary(recipient_id)
    if recipient is None:
        raise NotFoundError("User not found")
    if recipient.id == principal.user_id:
        raise ForbiddenError("Cannot send a message to yourself")
    return recipient


async def assert_group_member(
    principal: Principal,
    group_id: UUID,
    groups: GroupReader,
) -> Group:
    """Raise if the group doesn't exist or principal is not a current member."""
    group = await groups.get_by_id(group_id)
    if group is None:
        raise NotFoundError("Group not found")
    if not await groups.is_member(group_id, principal.user_id):
        raise ForbiddenError("You must be a member of the group")
    return group


async def assert_can_view(
    principal: Principal,
    message: Message | None,
    groups: GroupReader,
) -> Message:
    if message is None:
        raise NotFoundError("Message not found")
    if principal.user_id in (message.sender_id, message.recipient_id):
        return message
    if message.group_id is not None and await groups.is_member(
        message.group_id, principal.user_id
    ):
        return message
    raise ForbiddenError("Not authorized to view this message")


def assert_can_delete(principal: Principal, message: Message | None) -> Message:
    if message is None:
        raise NotFoundError("Message not found")
    if message.sender_id != principal.user_id and not principal.is_admin:
        raise ForbiddenError("Not authorized to delete this message")
    return message


async def assert_can_mark_read(
    principal: Principal,
    message: Message | None,
    groups: GroupReader,
) -> Message:
    """Direct messages: recipient only. Group messages: any current member."""
    if message is None:
        raise NotFoundError("Message not found")
    if message.group_id is None:
        if message.recipient_id != principal.user_id:
            raise ForbiddenError("Not authorized to mark this message as read")
        return message
    if not await groups.is_member(message.group_id, principal.user_id):
        raise ForbiddenError("You must be a member of the group")
    return message


def assert_is_sender(principal: Principal, message: Message) -> None:
    if message.sender_id != principal.user_id:
        raise ForbiddenError("Only the sender can broadcast this message")
