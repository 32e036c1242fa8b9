"""Tests for database repositories."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from badgeforge.data import BADGE_CATALOG, BadgeDefinition
from badgeforge.models import Badge, UserBadge
from badgeforge.repositories import BadgeRepository, UserRepository
from badgeforge.utils.timezone import ensure_utc


@pytest.mark.asyncio
class TestUserRepository:
    """Tests for User repository operations."""

    @pytest.fixture
    async def repository(self, db_session: AsyncSession):
        return UserRepository(db_session)

    async def test_create_user(self, repository):
        user = await repository.create(external_user_id="42", username="yellowcat")

        assert user.id is not None
        assert user.external_user_id == "42"
        assert user.is_banned is False
        assert user.first_login_at is not None

    async def test_get_by_external_id(self, repository, make_user):
        created = await make_user(external_user_id="777")

        found = await repository.get_by_external_id("777")

        assert found is not None
        assert found.id == created.id

    async def test_get_by_external_id_not_found(self, repository):
        assert await repository.get_by_external_id("nope") is None

    async def test_get_by_id(self, repository, make_user):
        created = await make_user()
        assert (await repository.get_by_id(created.id)).external_user_id == created.external_user_id
        assert await repository.get_by_id(created.id + 1000) is None

    async def test_update_profile(self, repository, make_user):
        user = await make_user(username="before", avatar_url="https://img/a.jpg")

        updated = await repository.update_profile(user, "after", None)

        assert updated.username == "after"
        assert updated.avatar_url is None


@pytest.mark.asyncio
class TestBadgeRepository:
    """Tests for Badge and UserBadge repository operations."""

    @pytest.fixture
    async def repository(self, db_session: AsyncSession):
        return BadgeRepository(db_session)

    async def test_catalog_is_seeded_in_order(self, repository):
        catalog = await repository.list_catalog()
        assert [badge.badge_id for badge in catalog] == [d.badge_id for d in BADGE_CATALOG]

    async def test_seed_is_idempotent_and_updates_fields(self, repository, db_session):
        renamed = BadgeDefinition("badge_2", "Super Supporter", "Community supporter", "Like and RT")

        await repository.seed_catalog([renamed])
        await repository.seed_catalog([renamed])

        count = await db_session.scalar(select(func.count()).select_from(Badge))
        assert count == len(BADGE_CATALOG)
        assert (await repository.get_badge("badge_2")).name == "Super Supporter"

    async def test_seed_stamps_window_on_time_limited_badges_only(self, repository):
        start = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)
        end = start + timedelta(hours=24)

        await repository.seed_catalog(BADGE_CATALOG, window_start=start, window_end=end)

        og = await repository.get_badge("og")
        assert og.is_time_limited is True
        assert ensure_utc(og.window_start) == start
        assert ensure_utc(og.window_end) == end
        supporter = await repository.get_badge("badge_2")
        assert supporter.window_start is None

    async def test_get_badge_unknown(self, repository):
        assert await repository.get_badge("badge_404") is None

    async def test_insert_award_if_absent(self, repository, make_user, db_session):
        user = await make_user()

        assert await repository.insert_award_if_absent(user.id, "badge_2") is True
        assert await repository.insert_award_if_absent(user.id, "badge_2") is False

        count = await db_session.scalar(
            select(func.count()).select_from(UserBadge).where(UserBadge.user_id == user.id)
        )
        assert count == 1
        assert await repository.has_award(user.id, "badge_2") is True
        assert await repository.has_award(user.id, "badge_3") is False

    async def test_awards_are_per_user(self, repository, make_user):
        alice, bob = await make_user(), await make_user()

        assert await repository.insert_award_if_absent(alice.id, "og") is True
        assert await repository.insert_award_if_absent(bob.id, "og") is True

    async def test_list_awards_for_user_oldest_first(self, repository, make_user):
        user = await make_user()
        base = datetime(2025, 6, 1, tzinfo=UTC)
        await repository.insert_award_if_absent(user.id, "badge_3", base + timedelta(hours=2))
        await repository.insert_award_if_absent(user.id, "og", base)

        awards = await repository.list_awards_for_user(user.id)

        assert [award.badge_id for award in awards] == ["og", "badge_3"]
