from __future__ import annotations

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect

from social_chat.api.deps import UoWFactoryDep, get_verifier, get_ws_manager
from social_chat.api.middleware.correlation_id import correlation_id_ctx
from social_chat.application.dto.principal import Principal
from social_chat.application.dto.realtime import Disconnect, Emit, error_to
from social_chat.application.exceptions import UnauthenticatedError, ValidationError
from social_chat.config import settings
from social_chat.domain.value_objects.enums import InboundEvent, OutboundEvent
from social_chat.infrastructure.ws.manager import ConnectionManager
from social_chat.infrastructure.ws.protocol import WsInbound, WsOutbound, parse_event
from social_chat.services import realtime_dispatch
from social_chat.services.realtime_dispatch import RealtimeContext

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

AUTH_FAILED_CLOSE_CODE = 4001


async def _authenticate(token: str | None) -> Principal | None:
    if not token:
        return None
    try:
        return await get_verifier().verify(token)
    except UnauthenticatedError:
        logger.debug("WS auth failed", exc_info=True)
        return None


@router.websocket("/ws/chat")
async def ws_chat(
    websocket: WebSocket,
    uow_factory: UoWFactoryDep,
    manager: Annotated[ConnectionManager, Depends(get_ws_manager)],
    token: str | None = Query(None),
) -> None:
    principal = await _authenticate(token)
    if principal is None:
        # Rejected before accept; never left pending.
        await websocket.close(code=AUTH_FAILED_CLOSE_CODE, reason="Authentication failed")
        return

    connection_id = await manager.connect(websocket, principal.user_id)
    cid_token = correlation_id_ctx.set(connection_id)
    ctx = RealtimeContext(
        registry=manager.registry,
        rooms=manager.rooms,
        principal=principal,
        connection_id=connection_id,
        uow_factory=uow_factory,
    )

    heartbeat_task = asyncio.create_task(
        _heartbeat(websocket), name=f"ws-heartbeat-{connection_id}",
    )
    reason = "closed"
    try:
        await _read_loop(websocket, manager, ctx)
    except WebSocketDisconnect as exc:
        reason = f"client closed ({exc.code})"
    except Exception:
        reason = "error"
        logger.exception("WS error for user %s", principal.user_id)
    finally:
        heartbeat_task.cancel()
        await manager.apply(await realtime_dispatch.dispatch(ctx, Disconnect(reason)))
        await manager.disconnect(connection_id)
        correlation_id_ctx.reset(cid_token)


async def _heartbeat(ws: WebSocket) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    try:
        while True:
            await asyncio.sleep(interval)
            await ws.send_text(WsOutbound(type=OutboundEvent.PONG.value, data={}).model_dump_json())
    except asyncio.CancelledError:
        pass
    except Exception:
        # A failed heartbeat means the socket is gone; the read loop sees it too.
        logger.debug("Heartbeat stopped", exc_info=True)


async def _read_loop(ws: WebSocket, manager: ConnectionManager, ctx: RealtimeContext) -> None:
    """Process frames strictly in arrival order for this connection."""
    while True:
        raw = await ws.receive_text()
        try:
            frame = WsInbound.model_validate_json(raw)
        except Exception:
            await manager.apply([error_to(ctx.connection_id, "Invalid payload")])
            continue

        if frame.type == InboundEvent.PING:
            await manager.apply([Emit((ctx.connection_id,), OutboundEvent.PONG)])
            continue

        try:
            event = parse_event(frame)
        except ValidationError as exc:
            await manager.apply([error_to(ctx.connection_id, exc.detail)])
            continue

        await manager.apply(await realtime_dispatch.dispatch(ctx, event))
