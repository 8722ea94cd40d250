from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UserSummary:
    id: int
    username: str | None
    profile_pic: str | None = None
