from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

# Injected wherever a timestamp is stamped so tests can pin time.
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
