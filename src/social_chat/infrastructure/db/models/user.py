from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, String, text
from sqlalchemy.orm import Mapped, mapped_column

from social_chat.infrastructure.db.base import Base


class UserModel(Base):
    """Read-only view of accounts owned by the user service."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    username: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    profile_pic: Mapped[str | None] = mapped_column(
        String(512),
        nullable=True,
        server_default=text("'default-profile.png'"),
    )
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
