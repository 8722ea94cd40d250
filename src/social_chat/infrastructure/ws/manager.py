"""In-process WebSocket transport: owns the sockets and applies effects."""
from __future__ import annotations

import logging
import uuid
from typing import Iterable

from fastapi import WebSocket

from social_chat.application.dto.realtime import Emit
from social_chat.application.realtime.registry import ConnectionRegistry
from social_chat.application.realtime.rooms import RoomTable
from social_chat.infrastructure.ws.protocol import WsOutbound
from social_chat.services import presence_service

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Binds connection ids to live sockets.

    Registry and room state are injected and shared with the dispatch layer;
    this class only adds the socket objects and the send loop.
    """

    def __init__(self, registry: ConnectionRegistry, rooms: RoomTable) -> None:
        self.registry = registry
        self.rooms = rooms
        self._sockets: dict[str, WebSocket] = {}

    async def connect(self, ws: WebSocket, principal_id: int) -> str:
        await ws.accept()
        connection_id = uuid.uuid4().hex
        self._sockets[connection_id] = ws
        logger.debug("WS connected: %s user=%s (total=%d)", connection_id, principal_id, len(self._sockets))
        await self.apply(
            presence_service.connect(self.registry, self.rooms, principal_id, connection_id)
        )
        return connection_id

    async def disconnect(self, connection_id: str) -> None:
        """Release a connection; duplicate calls are no-ops."""
        if self._sockets.pop(connection_id, None) is None and self.registry.session(connection_id) is None:
            return
        logger.debug("WS disconnected: %s", connection_id)
        await self.apply(presence_service.disconnect(self.registry, self.rooms, connection_id))

    async def apply(self, effects: Iterable[Emit]) -> None:
        """Send each effect in order.

        Sockets that fail a send are closed and released; closing ends their
        read loop through its normal disconnect path.
        """
        dead: list[str] = []
        for effect in effects:
            raw = WsOutbound(type=effect.event.value, data=effect.data).model_dump_json()
            for connection_id in effect.connection_ids:
                ws = self._sockets.get(connection_id)
                if ws is None or connection_id in dead:
                    continue
                try:
                    await ws.send_text(raw)
                except Exception:
                    logger.debug("Send to %s failed", connection_id, exc_info=True)
                    dead.append(connection_id)
        for connection_id in dead:
            await self._close(connection_id)
            await self.disconnect(connection_id)

    async def _close(self, connection_id: str) -> None:
        ws = self._sockets.get(connection_id)
        if ws is None:
            return
        try:
            await ws.close()
        except Exception:
            # Already closed by the peer.
            logger.debug("Close of %s failed", connection_id, exc_info=True)

    def __len__(self) -> int:
        return len(self._sockets)
