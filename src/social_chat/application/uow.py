from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Callable, Protocol

from social_chat.application.repositories.group import GroupReader
from social_chat.application.repositories.message import MessageReader, MessageWriter
from social_chat.application.repositories.user import UserReader


class UnitOfWork(Protocol):
    messages: MessageReader
    messages_w: MessageWriter
    users: UserReader
    groups: GroupReader

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...


# Opens a fresh unit of work per realtime event; sockets outlive sessions.
UoWFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]
