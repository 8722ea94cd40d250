from __future__ import annotations

import uuid

import pytest

from social_chat.application.dto.message import SendMessageDTO
from social_chat.services import conversation_service, delivery_service, message_service, presence_service
from tests.conftest import ALICE, BOB, CAROL, T0, make_message


def test_project_threads_counts_unread_for_viewer_only():
    messages = [
        make_message(sender_id=BOB, recipient_id=ALICE, offset_seconds=1),
        make_message(sender_id=BOB, recipient_id=ALICE, offset_seconds=2),
        make_message(sender_id=ALICE, recipient_id=BOB, offset_seconds=3),
    ]

    [thread] = conversation_service.project_threads(ALICE, messages)

    assert thread.counterpart_id == BOB
    assert thread.unread_count == 2
    assert thread.last_message is messages[2]


def test_project_threads_orders_by_recency_then_counterpart():
    messages = [
        make_message(sender_id=ALICE, recipient_id=CAROL, offset_seconds=5),
        make_message(sender_id=ALICE, recipient_id=BOB, offset_seconds=5),
        make_message(sender_id=ALICE, recipient_id=4, offset_seconds=9),
    ]

    threads = conversation_service.project_threads(ALICE, messages)

    assert [t.counterpart_id for t in threads] == [4, BOB, CAROL]


def test_project_threads_skips_group_messages():
    messages = [make_message(sender_id=BOB, group_id=uuid.uuid4())]

    assert conversation_service.project_threads(ALICE, messages) == []


@pytest.mark.asyncio
async def test_marking_one_read_decrements_unread(alice, bob, uow):
    for i in range(3):
        uow.messages.add(make_message(sender_id=ALICE, recipient_id=BOB, offset_seconds=i))

    [before] = await conversation_service.conversations_for(bob, uow)
    assert before.unread_count == 3

    await message_service.mark_read(bob, before.last_message.id, uow)

    [after] = await conversation_service.conversations_for(bob, uow)
    assert after.unread_count == 2
    assert await conversation_service.unread_total(bob, uow) == 2


@pytest.mark.asyncio
async def test_conversation_carries_counterpart_profile(alice, uow):
    uow.messages.add(make_message(sender_id=BOB, recipient_id=ALICE))

    [conv] = await conversation_service.conversations_for(alice, uow)

    assert conv.counterpart.id == BOB
    assert conv.counterpart.username == "user2"


@pytest.mark.asyncio
async def test_missing_profile_keeps_conversation(alice, uow):
    uow.messages.add(make_message(sender_id=77, recipient_id=ALICE))

    [conv] = await conversation_service.conversations_for(alice, uow)

    assert conv.counterpart.id == 77
    assert conv.counterpart.username is None


@pytest.mark.asyncio
async def test_no_messages_no_conversations(alice, uow):
    assert await conversation_service.conversations_for(alice, uow) == []
    assert await conversation_service.unread_total(alice, uow) == 0


@pytest.mark.asyncio
async def test_message_to_offline_user_shows_up_unread(registry, rooms, alice, bob, uow):
    presence_service.connect(registry, rooms, ALICE, "a1")
    msg = await message_service.send_to_user(
        alice, BOB, SendMessageDTO(content="hi"), uow, now=lambda: T0,
    )

    delivery = await delivery_service.deliver(registry, rooms, alice, msg.id, BOB, uow)
    assert delivery.recipient_online is False

    [conv] = await conversation_service.conversations_for(bob, uow)
    assert conv.counterpart.id == ALICE
    assert conv.last_message.content == "hi"
    assert conv.unread_count == 1
