"""Connection lifecycle, pair rooms and online/offline transitions."""
from __future__ import annotations

import logging

from social_chat.application.dto.realtime import Emit
from social_chat.application.exceptions import ValidationError
from social_chat.application.realtime.registry import ConnectionRegistry
from social_chat.application.realtime.rooms import RoomTable, chat_room, inbox_room, pair_key
from social_chat.domain.value_objects.enums import OutboundEvent, PresenceStatus

logger = logging.getLogger(__name__)


def _status(registry: ConnectionRegistry, user_id: int, status: PresenceStatus) -> Emit:
    # Presence is global: every live connection hears every transition.
    return Emit(
        registry.all_connections(),
        OutboundEvent.USER_STATUS,
        {"userId": user_id, "status": status.value},
    )


def connect(
    registry: ConnectionRegistry,
    rooms: RoomTable,
    principal_id: int,
    connection_id: str,
) -> list[Emit]:
    first = registry.register(principal_id, connection_id)
    rooms.join(connection_id, inbox_room(principal_id))
    if not first:
        return []
    logger.info("User %s online", principal_id)
    return [_status(registry, principal_id, PresenceStatus.ONLINE)]


def disconnect(
    registry: ConnectionRegistry,
    rooms: RoomTable,
    connection_id: str,
) -> list[Emit]:
    """Tear down a connection. Safe to call more than once."""
    rooms.leave_all(connection_id)
    principal_id, went_offline = registry.release(connection_id)
    if principal_id is None or not went_offline:
        return []
    logger.info("User %s offline", principal_id)
    return [_status(registry, principal_id, PresenceStatus.OFFLINE)]


def _resolve_principal(
    registry: ConnectionRegistry,
    connection_id: str,
    user_id: int | None,
) -> int:
    principal_id = registry.principal_of(connection_id)
    if principal_id is None:
        raise ValidationError("Connection is not registered")
    if user_id is not None and user_id != principal_id:
        raise ValidationError("userId does not match the authenticated user")
    return principal_id


def join_chat(
    registry: ConnectionRegistry,
    rooms: RoomTable,
    connection_id: str,
    recipient_id: int,
    user_id: int | None = None,
) -> list[Emit]:
    principal_id = _resolve_principal(registry, connection_id, user_id)
    key = pair_key(principal_id, recipient_id)
    rooms.join(connection_id, chat_room(principal_id, recipient_id))
    return [Emit((connection_id,), OutboundEvent.JOINED_CHAT, {"chatRoom": key})]


def leave_chat(
    registry: ConnectionRegistry,
    rooms: RoomTable,
    connection_id: str,
    recipient_id: int,
    user_id: int | None = None,
) -> list[Emit]:
    principal_id = _resolve_principal(registry, connection_id, user_id)
    rooms.leave(connection_id, chat_room(principal_id, recipient_id))
    return []
