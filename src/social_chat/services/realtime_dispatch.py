"""Dispatch table for inbound realtime events.

Each handler takes the dispatch context and one event and returns the frames
to emit; nothing here touches a socket, so the whole flow is testable
without a transport.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from social_chat.application.dto.principal import Principal
from social_chat.application.dto.realtime import (
    Disconnect,
    Emit,
    JoinChat,
    LeaveChat,
    RealtimeEvent,
    SendMessage,
    Typing,
    error_to,
)
from social_chat.application.exceptions import AppError, ValidationError
from social_chat.application.realtime.registry import ConnectionRegistry
from social_chat.application.realtime.rooms import RoomTable
from social_chat.application.uow import UoWFactory
from social_chat.services import delivery_service, presence_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RealtimeContext:
    registry: ConnectionRegistry
    rooms: RoomTable
    principal: Principal
    connection_id: str
    uow_factory: UoWFactory


Handler = Callable[[RealtimeContext, Any], Awaitable[list[Emit]]]


async def _on_send_message(ctx: RealtimeContext, event: SendMessage) -> list[Emit]:
    async with ctx.uow_factory() as uow:
        delivery = await delivery_service.deliver(
            ctx.registry, ctx.rooms, ctx.principal,
            event.message_id, event.recipient_id, uow,
        )
    return delivery.effects


async def _on_join_chat(ctx: RealtimeContext, event: JoinChat) -> list[Emit]:
    return presence_service.join_chat(
        ctx.registry, ctx.rooms, ctx.connection_id, event.recipient_id, event.user_id,
    )


async def _on_leave_chat(ctx: RealtimeContext, event: LeaveChat) -> list[Emit]:
    return presence_service.leave_chat(
        ctx.registry, ctx.rooms, ctx.connection_id, event.recipient_id, event.user_id,
    )


async def _on_typing(ctx: RealtimeContext, event: Typing) -> list[Emit]:
    if event.recipient_id == ctx.principal.user_id:
        return []
    return delivery_service.typing(
        ctx.rooms, ctx.principal.user_id, event.recipient_id, event.is_typing,
    )


async def _on_disconnect(ctx: RealtimeContext, event: Disconnect) -> list[Emit]:
    logger.debug("Disconnect %s (%s)", ctx.connection_id, event.reason)
    return presence_service.disconnect(ctx.registry, ctx.rooms, ctx.connection_id)


FAILURE_MESSAGES: dict[type, str] = {
    SendMessage: "Failed to broadcast message",
    JoinChat: "Failed to join chat",
    LeaveChat: "Failed to leave chat",
}

HANDLERS: dict[type, Handler] = {
    SendMessage: _on_send_message,
    JoinChat: _on_join_chat,
    LeaveChat: _on_leave_chat,
    Typing: _on_typing,
    Disconnect: _on_disconnect,
}


async def dispatch(ctx: RealtimeContext, event: RealtimeEvent) -> list[Emit]:
    """Run the handler for event.

    Application errors turn into a single error frame for the originating
    connection; they are never broadcast. Unexpected failures (a lost
    database connection, say) are logged and reported the same way so the
    socket stays open.
    """
    handler = HANDLERS.get(type(event))
    if handler is None:
        return [error_to(ctx.connection_id, f"Unsupported event {type(event).__name__}")]
    try:
        return await handler(ctx, event)
    except AppError as exc:
        if not isinstance(exc, ValidationError):
            logger.info(
                "%s rejected for user %s: %s",
                type(event).__name__, ctx.principal.user_id, exc.detail,
            )
        return [error_to(ctx.connection_id, exc.detail)]
    except Exception:
        logger.exception(
            "%s failed for user %s", type(event).__name__, ctx.principal.user_id,
        )
        return [error_to(ctx.connection_id, FAILURE_MESSAGES.get(type(event), "Request failed"))]
