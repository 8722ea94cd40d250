"""Logical broadcast rooms.

Two kinds exist: ``user:<id>`` (a principal's private inbox, joined on
connect) and ``chat:<lo>:<hi>`` (per-pair room, order independent). Rooms
exist only while at least one connection is in them.
"""
from __future__ import annotations

from social_chat.application.exceptions import ValidationError


def inbox_room(user_id: int) -> str:
    return f"user:{user_id}"


def pair_key(user_a: int, user_b: int) -> str:
    if user_a == user_b:
        raise ValidationError("A chat pair needs two distinct users")
    low, high = sorted((user_a, user_b))
    return f"{low}:{high}"


def chat_room(user_a: int, user_b: int) -> str:
    return f"chat:{pair_key(user_a, user_b)}"


class RoomTable:
    """Room membership of live connections, indexed both ways."""

    def __init__(self) -> None:
        self._members: dict[str, set[str]] = {}
        self._rooms_of: dict[str, set[str]] = {}

    def join(self, connection_id: str, room: str) -> bool:
        """Returns False if the connection was already in the room."""
        members = self._members.setdefault(room, set())
        if connection_id in members:
            return False
        members.add(connection_id)
        self._rooms_of.setdefault(connection_id, set()).add(room)
        return True

    def leave(self, connection_id: str, room: str) -> bool:
        members = self._members.get(room)
        if not members or connection_id not in members:
            return False
        members.discard(connection_id)
        if not members:
            del self._members[room]
        rooms = self._rooms_of.get(connection_id)
        if rooms is not None:
            rooms.discard(room)
            if not rooms:
                del self._rooms_of[connection_id]
        return True

    def leave_all(self, connection_id: str) -> frozenset[str]:
        """Drop the connection from every room; returns the rooms it left."""
        rooms = frozenset(self._rooms_of.get(connection_id, ()))
        for room in rooms:
            self.leave(connection_id, room)
        return rooms

    def members(self, room: str) -> frozenset[str]:
        return frozenset(self._members.get(room, ()))

    def rooms_of(self, connection_id: str) -> frozenset[str]:
        return frozenset(self._rooms_of.get(connection_id, ()))

    def connections_in(self, *rooms: str) -> tuple[str, ...]:
        """Union of the rooms' members, each connection listed once."""
        seen: dict[str, None] = {}
        for room in rooms:
            for connection_id in self._members.get(room, ()):
                seen.setdefault(connection_id, None)
        return tuple(seen)

    def __contains__(self, room: object) -> bool:
        return room in self._members
