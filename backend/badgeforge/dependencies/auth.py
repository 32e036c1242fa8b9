"""Session dependencies for FastAPI endpoints."""

import logging

from fastapi import Depends, Request

from badgeforge.dependencies.services import get_token_codec, get_user_repository
from badgeforge.models import User
from badgeforge.repositories import UserRepository
from badgeforge.services.session_tokens import SESSION_COOKIE_NAME, SessionClaims, SessionTokenCodec

logger = logging.getLogger(__name__)


class AuthenticationRequired(Exception):
    """Raised when an endpoint needs a session and the request has none."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)
        self.message = message


async def get_session_claims(
    request: Request,
    codec: SessionTokenCodec | None = Depends(get_token_codec),
) -> SessionClaims | None:
    """
    Read the session cookie.

    An absent, invalid or expired cookie yields None, never an error.
    """
    if codec is None:
        return None
    return codec.verify_token(request.cookies.get(SESSION_COOKIE_NAME))


async def get_current_user(
    claims: SessionClaims | None = Depends(get_session_claims),
    users: UserRepository = Depends(get_user_repository),
) -> User | None:
    """
    Dependency that returns the session's user without requiring authentication.

    Returns:
        User, or None if there is no valid session or its user no longer exists
    """
    if claims is None:
        return None

    user = await users.get_by_id(claims.user_id)
    if user is None or user.external_user_id != claims.external_user_id:
        logger.info("Session references unknown user %s", claims.user_id)
        return None
    return user


async def require_user(user: User | None = Depends(get_current_user)) -> User:
    """
    Dependency that requires a valid session.

    Raises:
        AuthenticationRequired: Mapped to 401 {"error": "Not authenticated"}
    """
    if user is None:
        raise AuthenticationRequired()
    return user
