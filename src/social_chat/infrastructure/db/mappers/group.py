from __future__ import annotations

from social_chat.domain.entities.group import Group
from social_chat.infrastructure.db.models.group import GroupModel


def model_to_entity(model: GroupModel) -> Group:
    return Group(
        id=model.id,
        name=model.name,
        created_by=model.created_by,
        created_at=model.created_at,
    )
