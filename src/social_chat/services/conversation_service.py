from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from social_chat.application.dto.principal import Principal
from social_chat.application.uow import UnitOfWork
from social_chat.domain.entities.conversation import Conversation
from social_chat.domain.entities.message import Message
from social_chat.domain.entities.user import UserSummary


@dataclass(slots=True)
class _Thread:
    counterpart_id: int
    last_message: Message
    unread_count: int = 0


def _newer(candidate: Message, current: Message) -> bool:
    # Equal timestamps fall back to id so the choice is stable across calls.
    return (candidate.created_at, str(candidate.id)) > (
        current.created_at,
        str(current.id),
    )


def project_threads(viewer_id: int, messages: Iterable[Message]) -> list[_Thread]:
    """Fold a viewer's direct messages into one thread per counterpart.

    Ordered by last message time descending, then counterpart id ascending.
    """
    threads: dict[int, _Thread] = {}
    for msg in messages:
        counterpart_id = msg.counterpart_of(viewer_id)
        if counterpart_id is None:
            continue

        thread = threads.get(counterpart_id)
        if thread is None:
            thread = threads[counterpart_id] = _Thread(counterpart_id, msg)
        elif _newer(msg, thread.last_message):
            thread.last_message = msg

        if msg.recipient_id == viewer_id and not msg.read:
            thread.unread_count += 1

    ordered = sorted(threads.values(), key=lambda t: t.counterpart_id)
    # list.sort is stable, so the id order survives among equal timestamps.
    ordered.sort(key=lambda t: t.last_message.created_at, reverse=True)
    return ordered


async def conversations_for(
    principal: Principal,
    uow: UnitOfWork,
) -> list[Conversation]:
    """Recompute the viewer's conversation list from the message store."""
    messages = await uow.messages.list_direct_for_user(principal.user_id)
    threads = project_threads(principal.user_id, messages)
    profiles = await uow.users.get_summaries(t.counterpart_id for t in threads)

    return [
        Conversation(
            counterpart=profiles.get(t.counterpart_id)
            or UserSummary(id=t.counterpart_id, username=None),
            last_message=t.last_message,
            unread_count=t.unread_count,
        )
        for t in threads
    ]


async def unread_total(principal: Principal, uow: UnitOfWork) -> int:
    messages = await uow.messages.list_direct_for_user(principal.user_id)
    return sum(1 for m in messages if m.recipient_id == principal.user_id and not m.read)
