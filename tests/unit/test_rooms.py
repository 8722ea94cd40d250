from __future__ import annotations

import pytest

from social_chat.application.exceptions import ValidationError
from social_chat.application.realtime.rooms import chat_room, inbox_room, pair_key


def test_room_names():
    assert inbox_room(7) == "user:7"
    assert chat_room(7, 3) == "chat:3:7"


def test_pair_room_is_order_independent():
    assert chat_room(1, 2) == chat_room(2, 1)
    assert pair_key(10, 9) == "9:10"


def test_pair_sorts_numerically():
    assert pair_key(10, 2) == "2:10"


def test_pair_with_self_is_rejected():
    with pytest.raises(ValidationError):
        chat_room(4, 4)


def test_join_is_idempotent(rooms):
    assert rooms.join("c1", "chat:1:2") is True
    assert rooms.join("c1", "chat:1:2") is False
    assert rooms.members("chat:1:2") == {"c1"}


def test_empty_room_disappears(rooms):
    rooms.join("c1", "chat:1:2")
    assert rooms.leave("c1", "chat:1:2") is True
    assert "chat:1:2" not in rooms
    assert rooms.leave("c1", "chat:1:2") is False


def test_leave_all(rooms):
    rooms.join("c1", "user:1")
    rooms.join("c1", "chat:1:2")
    rooms.join("c2", "user:1")

    left = rooms.leave_all("c1")

    assert left == {"user:1", "chat:1:2"}
    assert rooms.rooms_of("c1") == frozenset()
    assert rooms.members("user:1") == {"c2"}


def test_connections_in_dedupes_across_rooms(rooms):
    rooms.join("c1", "user:1")
    rooms.join("c1", "user:2")
    rooms.join("c2", "user:2")

    targets = rooms.connections_in("user:1", "user:2")

    assert sorted(targets) == ["c1", "c2"]
    assert len(targets) == 2
