"""Process-wide registry of live realtime connections.

All mutators are plain synchronous methods: under a single asyncio loop each
call runs to completion before any other event is processed, so no lock is
needed. Sharing an instance across OS threads requires external locking.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from social_chat.application.ports.clock import Clock, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ConnectionSession:
    connection_id: str
    principal_id: int
    connected_at: datetime


class ConnectionRegistry:
    """Maps principals to their live connections (one per device or tab).

    A principal is online iff it has at least one connection; its entry is
    dropped the moment the last connection goes away.
    """

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._sessions: dict[str, ConnectionSession] = {}
        self._presence: dict[int, set[str]] = {}

    def register(self, principal_id: int, connection_id: str) -> bool:
        """Add a connection. Returns True if it is the principal's first."""
        existing = self._sessions.get(connection_id)
        if existing is not None:
            if existing.principal_id != principal_id:
                raise ValueError(
                    f"Connection {connection_id} already belongs to {existing.principal_id}"
                )
            return False

        self._sessions[connection_id] = ConnectionSession(
            connection_id=connection_id,
            principal_id=principal_id,
            connected_at=self._clock(),
        )
        connections = self._presence.get(principal_id)
        first = connections is None
        if connections is None:
            connections = self._presence[principal_id] = set()
        connections.add(connection_id)
        logger.debug(
            "Registered %s for user %s (devices=%d)",
            connection_id, principal_id, len(connections),
        )
        return first

    def unregister(self, principal_id: int, connection_id: str) -> bool:
        """Remove a connection. Returns True if the principal is now offline.

        Unknown connections are ignored so duplicate disconnects are harmless.
        """
        connections = self._presence.get(principal_id)
        if connections is None or connection_id not in connections:
            return False

        connections.discard(connection_id)
        self._sessions.pop(connection_id, None)
        if connections:
            return False

        del self._presence[principal_id]
        logger.debug("User %s has no connections left", principal_id)
        return True

    def release(self, connection_id: str) -> tuple[int | None, bool]:
        """Unregister by connection id alone.

        Returns (principal_id, went_offline); principal_id is None when the
        connection was not registered.
        """
        session = self._sessions.get(connection_id)
        if session is None:
            return None, False
        return session.principal_id, self.unregister(session.principal_id, connection_id)

    def is_online(self, principal_id: int) -> bool:
        return principal_id in self._presence

    def connections_of(self, principal_id: int) -> frozenset[str]:
        return frozenset(self._presence.get(principal_id, ()))

    def principal_of(self, connection_id: str) -> int | None:
        session = self._sessions.get(connection_id)
        return session.principal_id if session else None

    def session(self, connection_id: str) -> ConnectionSession | None:
        return self._sessions.get(connection_id)

    def all_connections(self) -> tuple[str, ...]:
        return tuple(self._sessions)

    def online_principals(self) -> frozenset[int]:
        return frozenset(self._presence)

    def __len__(self) -> int:
        return len(self._sessions)
