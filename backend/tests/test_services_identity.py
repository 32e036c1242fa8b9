"""Tests for identity resolution (first login vs returning user)."""

from datetime import timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from badgeforge.models import User
from badgeforge.repositories import UserRepository
from badgeforge.services.identity import IdentityResolver
from badgeforge.services.x_oauth import ExternalProfile
from badgeforge.utils.timezone import ensure_utc, get_now


@pytest.mark.asyncio
class TestIdentityResolver:
    @pytest.fixture
    def resolver(self, db_session):
        return IdentityResolver(UserRepository(db_session))

    async def test_first_login_creates_user(self, resolver, db_session):
        now = get_now()
        profile = ExternalProfile("111", "yellowcat", "https://img.example/cat.jpg")

        user, is_new = await resolver.resolve(profile, now)

        assert is_new is True
        assert user.id is not None
        assert user.external_user_id == "111"
        assert user.username == "yellowcat"
        assert user.avatar_url == "https://img.example/cat.jpg"
        assert user.is_banned is False
        assert abs(ensure_utc(user.first_login_at) - now) < timedelta(seconds=1)

    async def test_returning_user_refreshes_profile_only(self, resolver, db_session, make_user):
        joined = get_now() - timedelta(days=3)
        existing = await make_user(
            external_user_id="222", username="oldname", first_login_at=joined
        )

        user, is_new = await resolver.resolve(
            ExternalProfile("222", "newname", "https://img.example/new.jpg")
        )

        assert is_new is False
        assert user.id == existing.id
        assert user.username == "newname"
        assert user.avatar_url == "https://img.example/new.jpg"
        assert abs(ensure_utc(user.first_login_at) - joined) < timedelta(seconds=1)

        count = await db_session.scalar(select(func.count()).select_from(User))
        assert count == 1

    async def test_same_handle_different_account_is_a_new_user(self, resolver, make_user):
        await make_user(external_user_id="333", username="cat")

        user, is_new = await resolver.resolve(ExternalProfile("444", "cat"))

        assert is_new is True
        assert user.external_user_id == "444"

    async def test_duplicate_external_id_insert_is_rejected(self, db_session, make_user):
        await make_user(external_user_id="555")

        with pytest.raises(IntegrityError):
            await UserRepository(db_session).create(external_user_id="555", username="dupe")
