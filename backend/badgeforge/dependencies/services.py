"""Dependency injection for repositories and flow services."""

import logging
from datetime import timedelta

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from badgeforge.config import Settings, get_settings
from badgeforge.db import get_db
from badgeforge.repositories import BadgeRepository, UserRepository
from badgeforge.services.auth_flow import AuthFlowController
from badgeforge.services.badges import BadgePolicy, FoundingWindow
from badgeforge.services.identity import IdentityResolver
from badgeforge.services.session_tokens import SessionTokenCodec
from badgeforge.services.x_oauth import XOAuthClient

logger = logging.getLogger(__name__)


def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_badge_repository(db: AsyncSession = Depends(get_db)) -> BadgeRepository:
    return BadgeRepository(db)


def get_oauth_client(settings: Settings = Depends(get_settings)) -> XOAuthClient:
    """
    Get XOAuthClient instance.

    Tests override this dependency to inject an httpx MockTransport.
    """
    return XOAuthClient(settings)


def get_token_codec(settings: Settings = Depends(get_settings)) -> SessionTokenCodec | None:
    """
    Get SessionTokenCodec instance.

    Returns:
        Codec, or None when JWT_SECRET is not configured (every session is
        then treated as absent and the login flow reports config_error)
    """
    if not settings.jwt_secret.strip():
        logger.debug("JWT_SECRET is not set - sessions are disabled")
        return None
    return SessionTokenCodec(settings.jwt_secret, timedelta(days=settings.session_days))


def get_badge_policy(
    badges: BadgeRepository = Depends(get_badge_repository),
    settings: Settings = Depends(get_settings),
) -> BadgePolicy:
    window = FoundingWindow.from_launch(settings.launch_date, settings.og_window_hours)
    return BadgePolicy(badges, window)


def get_auth_flow(
    settings: Settings = Depends(get_settings),
    oauth: XOAuthClient = Depends(get_oauth_client),
    users: UserRepository = Depends(get_user_repository),
    policy: BadgePolicy = Depends(get_badge_policy),
    codec: SessionTokenCodec | None = Depends(get_token_codec),
) -> AuthFlowController:
    """
    Get AuthFlowController wired with the request's repositories.

    Args:
        settings: Application settings
        oauth: X OAuth client
        users: User repository
        policy: Badge policy
        codec: Session token codec (None when unconfigured)

    Returns:
        AuthFlowController instance
    """
    return AuthFlowController(
        settings=settings,
        oauth=oauth,
        resolver=IdentityResolver(users),
        policy=policy,
        codec=codec,
    )
