from __future__ import annotations

import uuid

import pytest

from social_chat.application.dto.principal import Principal
from social_chat.application.dto.realtime import (
    Disconnect,
    JoinChat,
    SendMessage,
    Typing,
)
from social_chat.domain.value_objects.enums import OutboundEvent
from social_chat.services import presence_service
from social_chat.services.realtime_dispatch import RealtimeContext, dispatch
from tests.conftest import ALICE, BOB, CAROL, fake_uow_factory, make_message


@pytest.fixture
def ctx(registry, rooms, uow):
    presence_service.connect(registry, rooms, ALICE, "a1")
    presence_service.connect(registry, rooms, BOB, "b1")
    return RealtimeContext(
        registry=registry,
        rooms=rooms,
        principal=Principal(user_id=ALICE),
        connection_id="a1",
        uow_factory=fake_uow_factory(uow),
    )


@pytest.mark.asyncio
async def test_send_message_delivers_stored_message(ctx, uow):
    msg = make_message(sender_id=ALICE, recipient_id=BOB, content="hello")
    uow.messages.add(msg)

    [emit] = await dispatch(ctx, SendMessage(message_id=msg.id, recipient_id=BOB))

    assert emit.event == OutboundEvent.NEW_MESSAGE
    assert sorted(emit.connection_ids) == ["a1", "b1"]
    assert emit.data["content"] == "hello"


@pytest.mark.asyncio
async def test_missing_message_becomes_error_for_originator_only(ctx):
    [emit] = await dispatch(ctx, SendMessage(message_id=uuid.uuid4()))

    assert emit.event == OutboundEvent.ERROR
    assert emit.connection_ids == ("a1",)
    assert emit.data == {"message": "Message not found"}


@pytest.mark.asyncio
async def test_forbidden_send_becomes_error(ctx, uow):
    msg = make_message(sender_id=BOB, recipient_id=ALICE)
    uow.messages.add(msg)

    [emit] = await dispatch(ctx, SendMessage(message_id=msg.id))

    assert emit.event == OutboundEvent.ERROR
    assert emit.connection_ids == ("a1",)


@pytest.mark.asyncio
async def test_join_chat_replies_to_caller(ctx):
    [emit] = await dispatch(ctx, JoinChat(recipient_id=BOB))

    assert emit.event == OutboundEvent.JOINED_CHAT
    assert emit.connection_ids == ("a1",)
    assert "a1" in ctx.rooms.members("chat:1:2")


@pytest.mark.asyncio
async def test_join_chat_with_self_is_error(ctx):
    [emit] = await dispatch(ctx, JoinChat(recipient_id=ALICE))

    assert emit.event == OutboundEvent.ERROR


@pytest.mark.asyncio
async def test_typing_to_self_is_ignored(ctx):
    assert await dispatch(ctx, Typing(recipient_id=ALICE, is_typing=True)) == []


@pytest.mark.asyncio
async def test_typing_reaches_recipient(ctx):
    [emit] = await dispatch(ctx, Typing(recipient_id=BOB, is_typing=False))

    assert emit.connection_ids == ("b1",)
    assert emit.data == {"senderId": ALICE, "isTyping": False}


@pytest.mark.asyncio
async def test_typing_to_offline_user_is_silent(ctx):
    assert await dispatch(ctx, Typing(recipient_id=CAROL, is_typing=True)) == []


@pytest.mark.asyncio
async def test_disconnect_announces_offline(ctx):
    [emit] = await dispatch(ctx, Disconnect())

    assert emit.event == OutboundEvent.USER_STATUS
    assert emit.connection_ids == ("b1",)
    assert emit.data == {"userId": ALICE, "status": "offline"}
    assert not ctx.registry.is_online(ALICE)


@pytest.mark.asyncio
async def test_unsupported_event_is_error(ctx):
    [emit] = await dispatch(ctx, object())

    assert emit.event == OutboundEvent.ERROR


@pytest.mark.asyncio
async def test_store_failure_becomes_error_and_keeps_sender_online(ctx, uow, monkeypatch):
    async def _lost_connection(message_id):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(uow.messages, "get_by_id", _lost_connection)

    [emit] = await dispatch(ctx, SendMessage(message_id=uuid.uuid4(), recipient_id=BOB))

    assert emit.event == OutboundEvent.ERROR
    assert emit.connection_ids == ("a1",)
    assert emit.data == {"message": "Failed to broadcast message"}
    assert ctx.registry.is_online(ALICE)


@pytest.mark.asyncio
async def test_typing_after_join_chat_uses_inbox_only(ctx):
    presence_service.connect(ctx.registry, ctx.rooms, ALICE, "a2")
    await dispatch(ctx, JoinChat(recipient_id=BOB))
    presence_service.join_chat(ctx.registry, ctx.rooms, "a2", BOB)
    presence_service.join_chat(ctx.registry, ctx.rooms, "b1", ALICE)

    [emit] = await dispatch(ctx, Typing(recipient_id=BOB, is_typing=True))

    assert emit.connection_ids == ("b1",)
