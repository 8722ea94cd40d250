from __future__ import annotations

from social_chat.domain.entities.user import UserSummary
from social_chat.infrastructure.db.models.user import UserModel


def model_to_summary(model: UserModel) -> UserSummary:
    return UserSummary(id=model.id, username=model.username, profile_pic=model.profile_pic)
