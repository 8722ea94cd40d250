"""Shared test fixtures."""
from __future__ import annotations

import dataclasses
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Iterable
from uuid import UUID

import pytest

from social_chat.application.dto.principal import Principal
from social_chat.application.realtime.registry import ConnectionRegistry
from social_chat.application.realtime.rooms import RoomTable
from social_chat.domain.entities.group import Group
from social_chat.domain.entities.message import Message, ReadReceipt
from social_chat.domain.entities.user import UserSummary
from social_chat.domain.events.message_persisted import MessagePersisted

ALICE = 1
BOB = 2
CAROL = 3
ADMIN = 99

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def alice() -> Principal:
    return Principal(user_id=ALICE)


@pytest.fixture
def bob() -> Principal:
    return Principal(user_id=BOB)


@pytest.fixture
def admin_principal() -> Principal:
    return Principal(user_id=ADMIN, roles=["admin"])


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture
def rooms() -> RoomTable:
    return RoomTable()


def make_message(
    *,
    sender_id: int = ALICE,
    recipient_id: int | None = BOB,
    group_id: UUID | None = None,
    content: str = "hi",
    read: bool = False,
    created_at: datetime | None = None,
    offset_seconds: int = 0,
) -> Message:
    if group_id is not None:
        recipient_id = None
    return Message(
        id=uuid.uuid4(),
        sender_id=sender_id,
        recipient_id=recipient_id,
        group_id=group_id,
        content=content,
        media_url=None,
        media_type="none",
        read=read,
        read_by=(),
        created_at=(created_at or T0) + timedelta(seconds=offset_seconds),
    )


@dataclass
class FakeMessageReader:
    _messages: dict[UUID, Message] = field(default_factory=dict)

    def add(self, *messages: Message) -> None:
        for m in messages:
            self._messages[m.id] = m

    async def get_by_id(self, message_id: UUID) -> Message | None:
        return self._messages.get(message_id)

    async def list_between(self, user_a: int, user_b: int) -> list[Message]:
        pair = {user_a, user_b}
        found = [
            m for m in self._messages.values()
            if m.group_id is None and {m.sender_id, m.recipient_id} == pair
        ]
        return sorted(found, key=lambda m: (m.created_at, str(m.id)))

    async def list_for_group(self, group_id: UUID) -> list[Message]:
        found = [m for m in self._messages.values() if m.group_id == group_id]
        return sorted(found, key=lambda m: (m.created_at, str(m.id)))

    async def list_direct_for_user(self, user_id: int) -> list[Message]:
        found = [
            m for m in self._messages.values()
            if m.group_id is None and user_id in (m.sender_id, m.recipient_id)
        ]
        return sorted(found, key=lambda m: (m.created_at, str(m.id)), reverse=True)


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader

    async def create(self, message: Message) -> Message:
        self._reader._messages[message.id] = message
        return message

    async def delete(self, message_id: UUID) -> None:
        self._reader._messages.pop(message_id, None)

    async def mark_read(self, message_id: UUID) -> None:
        msg = self._reader._messages[message_id]
        self._reader._messages[message_id] = dataclasses.replace(msg, read=True)

    async def add_read_receipt(self, message_id: UUID, user_id: int, read_at: datetime) -> None:
        msg = self._reader._messages[message_id]
        if msg.is_read_by(user_id):
            return
        self._reader._messages[message_id] = dataclasses.replace(
            msg, read_by=msg.read_by + (ReadReceipt(user_id, read_at),)
        )


@dataclass
class FakeUserReader:
    _users: dict[int, UserSummary] = field(default_factory=dict)

    def add(self, *user_ids: int) -> None:
        for uid in user_ids:
            self._users[uid] = UserSummary(id=uid, username=f"user{uid}", profile_pic=None)

    async def get_summary(self, user_id: int) -> UserSummary | None:
        return self._users.get(user_id)

    async def get_summaries(self, user_ids: Iterable[int]) -> dict[int, UserSummary]:
        return {uid: self._users[uid] for uid in user_ids if uid in self._users}


@dataclass
class FakeGroupReader:
    _groups: dict[UUID, Group] = field(default_factory=dict)
    _members: dict[UUID, list[int]] = field(default_factory=dict)

    def add(self, *member_ids: int, name: str = "friends") -> Group:
        group = Group(id=uuid.uuid4(), name=name, created_by=member_ids[0], created_at=T0)
        self._groups[group.id] = group
        self._members[group.id] = list(member_ids)
        return group

    async def get_by_id(self, group_id: UUID) -> Group | None:
        return self._groups.get(group_id)

    async def is_member(self, group_id: UUID, user_id: int) -> bool:
        return user_id in self._members.get(group_id, [])

    async def list_member_ids(self, group_id: UUID) -> list[int]:
        return list(self._members.get(group_id, []))


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    users: FakeUserReader = field(default_factory=FakeUserReader)
    groups: FakeGroupReader = field(default_factory=FakeGroupReader)
    commits: int = 0

    def __post_init__(self) -> None:
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        pass


def fake_uow_factory(uow: FakeUoW):
    @asynccontextmanager
    async def _open() -> AsyncIterator[FakeUoW]:
        yield uow

    return _open


@dataclass
class FakePublisher:
    events: list[MessagePersisted] = field(default_factory=list)
    fail: bool = False

    async def publish(self, event: MessagePersisted) -> None:
        if self.fail:
            raise ConnectionError("redis down")
        self.events.append(event)


@pytest.fixture
def uow() -> FakeUoW:
    u = FakeUoW()
    u.users.add(ALICE, BOB, CAROL, ADMIN)
    return u
