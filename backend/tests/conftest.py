"""Pytest configuration and shared fixtures."""

import os
import secrets
from collections.abc import AsyncGenerator
from datetime import timedelta
from urllib.parse import parse_qs

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("X_CLIENT_ID", "test-client-id")
os.environ.setdefault("X_REDIRECT_URI", "http://test/api/auth/callback")

# ruff: noqa: E402 - Imports must come after environment variable setup
from badgeforge.config import Settings, get_settings
from badgeforge.data import BADGE_CATALOG
from badgeforge.db import Base, get_db
from badgeforge.dependencies.services import get_oauth_client
from badgeforge.main import app
from badgeforge.repositories import BadgeRepository
from badgeforge.services.session_tokens import SESSION_COOKIE_NAME, SessionTokenCodec
from badgeforge.services.x_oauth import XOAuthClient
from badgeforge.utils.rate_limit import limiter
from badgeforge.utils.timezone import get_now

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_JWT_SECRET = "test-jwt-secret"


@pytest.fixture(autouse=True)
def _disable_rate_limits():
    """Keep slowapi out of the way; the limits are per-IP and every test shares one."""
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def test_settings() -> Settings:
    """Settings with X login configured and the OG window open (launched an hour ago)."""
    return Settings(
        _env_file=None,
        database_url=TEST_DATABASE_URL,
        x_client_id="test-client-id",
        x_client_secret="",
        x_redirect_uri="http://test/api/auth/callback",
        jwt_secret=TEST_JWT_SECRET,
        launch_date=get_now() - timedelta(hours=1),
    )


@pytest.fixture
def codec() -> SessionTokenCodec:
    return SessionTokenCodec(TEST_JWT_SECRET)


@pytest.fixture
async def db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Override the global async_session_maker so startup helpers use the test database
    from badgeforge import db

    original_maker = db.async_session_maker
    db.async_session_maker = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    try:
        yield engine
    finally:
        db.async_session_maker = original_maker

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

        await engine.dispose(close=True)


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession]:
    """Create test database session with the badge catalog seeded.

    Badges are seeded without their own window so the OG window follows
    ``test_settings.launch_date``.
    """
    async_session = sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    session = async_session()
    try:
        await BadgeRepository(session).seed_catalog(BADGE_CATALOG)
        yield session
    finally:
        await session.close()


class FakeXProvider:
    """Scriptable stand-in for the X token and profile endpoints."""

    def __init__(self):
        self.token_status = 200
        self.profile_status = 200
        self.profile = {
            "id": "1234567890",
            "username": "yellowcat",
            "name": "Yellow Cat",
            "profile_image_url": "https://pbs.twimg.com/profile_images/1/cat_normal.jpg",
        }
        self.requests: list[httpx.Request] = []

    def token_form(self, index: int = 0) -> dict[str, str]:
        """Form fields of the n-th token request."""
        token_requests = [r for r in self.requests if r.url.path.endswith("/oauth2/token")]
        body = parse_qs(token_requests[index].content.decode())
        return {k: v[0] for k, v in body.items()}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/oauth2/token"):
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "invalid_request"})
            return httpx.Response(
                200,
                json={
                    "token_type": "bearer",
                    "expires_in": 7200,
                    "access_token": "x-access-token",
                    "scope": "users.read tweet.read",
                },
            )
        if request.url.path.endswith("/users/me"):
            if self.profile_status != 200:
                return httpx.Response(self.profile_status, json={"title": "Unauthorized"})
            return httpx.Response(200, json={"data": self.profile})
        return httpx.Response(404)


@pytest.fixture
def x_provider() -> FakeXProvider:
    return FakeXProvider()


@pytest.fixture
async def client(db_session: AsyncSession, test_settings: Settings, x_provider: FakeXProvider):
    """Create test client with database, settings and X provider overrides.

    Redirects are not followed so tests can assert on the 302 and its cookies.
    """

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_oauth_client] = lambda: XOAuthClient(
        test_settings, transport=httpx.MockTransport(x_provider.handler)
    )

    test_client = AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test", follow_redirects=False
    )

    try:
        yield test_client
    finally:
        await test_client.aclose()
        app.dependency_overrides.clear()


# ============================================
# Factory Fixtures
# ============================================


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory fixture that persists User rows with sensible defaults.

    Usage:
        user = await make_user(username="catlover", is_banned=True)
    """

    async def _make_user(**kwargs):
        from badgeforge.models import User

        now = get_now()
        defaults = {
            "external_user_id": str(secrets.randbelow(10**12)),
            "username": f"user_{secrets.token_hex(4)}",
            "avatar_url": None,
            "first_login_at": now,
            "created_at": now,
            "is_banned": False,
        }
        user = User(**{**defaults, **kwargs})
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def login_as(client: AsyncClient, codec: SessionTokenCodec):
    """Put a valid session cookie for ``user`` on the test client."""

    def _login_as(user):
        client.cookies.set(SESSION_COOKIE_NAME, codec.create_token(user))
        return client

    return _login_as
