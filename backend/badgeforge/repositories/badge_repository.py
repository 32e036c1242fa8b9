"""Badge repository for the catalog and per-user awards."""

import logging
from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from badgeforge.data import BadgeDefinition
from badgeforge.models import Badge, UserBadge
from badgeforge.utils.timezone import get_now

logger = logging.getLogger(__name__)


class BadgeRepository:
    """Repository for Badge and UserBadge models."""

    def __init__(self, db: AsyncSession):
        """
        Initialize the repository.

        Args:
            db: AsyncSession database session
        """
        self.db = db

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    async def seed_catalog(
        self,
        definitions: Iterable[BadgeDefinition],
        window_start: datetime | None = None,
        window_end: datetime | None = None,
    ) -> int:
        """
        Insert or replace catalog badges by ``badge_id``.

        Time-limited badges get ``window_start``/``window_end`` written on
        every seed so a changed launch date takes effect on restart.

        Args:
            definitions: Badge definitions to seed
            window_start: Window start for time-limited badges (optional)
            window_end: Window end for time-limited badges (optional)

        Returns:
            Number of badges seeded
        """
        result = await self.db.execute(select(Badge))
        existing = {badge.badge_id: badge for badge in result.scalars().all()}

        count = 0
        for definition in definitions:
            badge = existing.get(definition.badge_id)
            if badge is None:
                badge = Badge(badge_id=definition.badge_id)
                self.db.add(badge)
            badge.name = definition.name
            badge.description = definition.description
            badge.mission = definition.mission
            badge.is_time_limited = definition.is_time_limited
            if definition.is_time_limited:
                badge.window_start = window_start
                badge.window_end = window_end
            count += 1

        await self.db.commit()
        logger.info(f"Seeded {count} catalog badges")
        return count

    async def list_catalog(self) -> list[Badge]:
        result = await self.db.execute(select(Badge).order_by(Badge.id))
        return list(result.scalars().all())

    async def get_badge(self, badge_id: str) -> Badge | None:
        result = await self.db.execute(select(Badge).where(Badge.badge_id == badge_id))
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Awards
    # ------------------------------------------------------------------

    async def insert_award_if_absent(
        self, user_id: int, badge_id: str, unlocked_at: datetime | None = None
    ) -> bool:
        """
        Award a badge unless the user already holds it.

        Uses ``INSERT .. ON CONFLICT DO NOTHING`` so two concurrent awards for
        the same pair leave exactly one row.

        Args:
            user_id: Local user id
            badge_id: Catalog badge id
            unlocked_at: Award timestamp (defaults to now)

        Returns:
            True if a row was inserted, False if the award already existed
        """
        dialect = self.db.get_bind().dialect.name
        insert = postgresql.insert if dialect == "postgresql" else sqlite.insert

        stmt = (
            insert(UserBadge)
            .values(user_id=user_id, badge_id=badge_id, unlocked_at=unlocked_at or get_now())
            .on_conflict_do_nothing(index_elements=["user_id", "badge_id"])
        )
        result = await self.db.execute(stmt)
        await self.db.commit()

        return (result.rowcount or 0) > 0  # type: ignore[union-attr]

    async def has_award(self, user_id: int, badge_id: str) -> bool:
        result = await self.db.execute(
            select(UserBadge.id).where(UserBadge.user_id == user_id, UserBadge.badge_id == badge_id)
        )
        return result.first() is not None

    async def list_awards_for_user(self, user_id: int) -> list[UserBadge]:
        """
        Get every badge a user holds, oldest first.

        Args:
            user_id: Local user id

        Returns:
            List of UserBadge rows
        """
        result = await self.db.execute(
            select(UserBadge)
            .where(UserBadge.user_id == user_id)
            .order_by(UserBadge.unlocked_at, UserBadge.id)
        )
        return list(result.scalars().all())
