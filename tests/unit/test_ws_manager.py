from __future__ import annotations

import json

import pytest

from social_chat.application.dto.realtime import Emit
from social_chat.domain.value_objects.enums import OutboundEvent
from social_chat.infrastructure.ws.manager import ConnectionManager
from tests.conftest import ALICE, BOB


class FakeSocket:
    def __init__(self, broken: bool = False) -> None:
        self.accepted = False
        self.closed = False
        self.broken = broken
        self.sent: list[dict] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_text(self, raw: str) -> None:
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(json.loads(raw))

    async def close(self) -> None:
        if self.closed:
            raise RuntimeError("already closed")
        self.closed = True


@pytest.fixture
def manager(registry, rooms) -> ConnectionManager:
    return ConnectionManager(registry, rooms)


@pytest.mark.asyncio
async def test_connect_accepts_and_announces(manager):
    ws = FakeSocket()

    connection_id = await manager.connect(ws, ALICE)

    assert ws.accepted
    assert manager.registry.principal_of(connection_id) == ALICE
    assert ws.sent == [{"type": "userStatus", "data": {"userId": ALICE, "status": "online"}}]
    assert len(manager) == 1


@pytest.mark.asyncio
async def test_failed_send_releases_connection(manager):
    alice = FakeSocket()
    await manager.connect(alice, ALICE)
    bob = FakeSocket()
    bob_id = await manager.connect(bob, BOB)
    bob.broken = True

    await manager.apply([Emit((bob_id,), OutboundEvent.PONG)])

    assert bob.closed
    assert not manager.registry.is_online(BOB)
    assert len(manager) == 1
    assert alice.sent[-1] == {"type": "userStatus", "data": {"userId": BOB, "status": "offline"}}


@pytest.mark.asyncio
async def test_disconnect_is_idempotent(manager):
    ws = FakeSocket()
    connection_id = await manager.connect(ws, ALICE)

    await manager.disconnect(connection_id)
    await manager.disconnect(connection_id)

    assert len(manager) == 0
    assert len(manager.registry) == 0


@pytest.mark.asyncio
async def test_effects_for_unknown_connections_are_skipped(manager):
    ws = FakeSocket()
    connection_id = await manager.connect(ws, ALICE)

    await manager.apply([Emit(("ghost", connection_id), OutboundEvent.PONG)])

    assert ws.sent[-1] == {"type": "pong", "data": {}}


@pytest.mark.asyncio
async def test_dead_socket_already_closed_is_still_released(manager):
    ws = FakeSocket()
    connection_id = await manager.connect(ws, ALICE)
    ws.broken = True
    ws.closed = True

    await manager.apply([Emit((connection_id,), OutboundEvent.PONG)])

    assert manager.registry.session(connection_id) is None
    assert len(manager) == 0
