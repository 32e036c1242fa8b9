"""User repository for identity lookups and profile refreshes."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from badgeforge.models import User
from badgeforge.utils.timezone import get_now


class UserRepository:
    """Repository for User model."""

    def __init__(self, db: AsyncSession):
        """
        Initialize the repository.

        Args:
            db: AsyncSession database session
        """
        self.db = db

    async def get_by_id(self, user_id: int) -> User | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_external_id(self, external_user_id: str) -> User | None:
        """
        Get a user by their X account id.

        Args:
            external_user_id: Provider-side user id

        Returns:
            User if found, None otherwise
        """
        result = await self.db.execute(
            select(User).where(User.external_user_id == external_user_id)
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        external_user_id: str,
        username: str,
        avatar_url: str | None = None,
        first_login_at: datetime | None = None,
    ) -> User:
        """
        Create a new user.

        The unique constraint on ``external_user_id`` rejects a concurrent
        duplicate insert with ``IntegrityError``; the session is rolled back
        before the error propagates.

        Args:
            external_user_id: Provider-side user id
            username: Provider handle
            avatar_url: Profile image URL (optional)
            first_login_at: First login timestamp (defaults to now)

        Returns:
            Created User instance
        """
        now = first_login_at or get_now()
        user = User(
            external_user_id=external_user_id,
            username=username,
            avatar_url=avatar_url,
            first_login_at=now,
            created_at=now,
            is_banned=False,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(user)
        return user

    async def update_profile(self, user: User, username: str, avatar_url: str | None) -> User:
        """
        Refresh the provider-sourced profile fields of an existing user.

        Args:
            user: User to update
            username: Latest provider handle
            avatar_url: Latest profile image URL

        Returns:
            Updated User instance
        """
        user.username = username
        user.avatar_url = avatar_url
        await self.db.commit()
        await self.db.refresh(user)
        return user

