"""User model for X-authenticated campaign participants."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from badgeforge.db import Base
from badgeforge.utils.timezone import get_now


class User(Base):
    """A local user anchored to exactly one X account.

    ``external_user_id`` is the identity anchor and never changes once set.
    ``username`` and ``avatar_url`` mirror the provider profile and are
    refreshed on every login.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_user_id: Mapped[str] = mapped_column(
        String(64), unique=True, index=True, nullable=False
    )
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    first_login_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=get_now
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=get_now
    )
    is_banned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"User(id={self.id}, external_user_id='{self.external_user_id}', username='{self.username}')"
