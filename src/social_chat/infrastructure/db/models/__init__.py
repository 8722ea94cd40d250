"""Import all models so Alembic can discover them via Base.metadata."""
from social_chat.infrastructure.db.models.group import GroupMemberModel, GroupModel
from social_chat.infrastructure.db.models.message import MessageModel, MessageReadModel
from social_chat.infrastructure.db.models.user import UserModel

__all__ = [
    "GroupMemberModel",
    "GroupModel",
    "MessageModel",
    "MessageReadModel",
    "UserModel",
]
