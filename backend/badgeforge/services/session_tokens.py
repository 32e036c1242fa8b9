"""Stateless session tokens for BadgeForge.

Sessions are HS256 JWTs carried in an httpOnly cookie. There is no server-side
session store: a token is valid iff its signature verifies under the process
secret and it has not expired. Logout only clears the cookie, so a copied token
stays valid until its natural expiry.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from authlib.jose import JoseError, JsonWebToken
from starlette.responses import Response

from badgeforge.models import User
from badgeforge.utils.timezone import get_now

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
SESSION_COOKIE_NAME = "badgeforge_session"
DEFAULT_SESSION_LIFETIME = timedelta(days=7)

# Pin the accepted algorithm so a forged "alg: none" header is rejected
_jwt = JsonWebToken([JWT_ALGORITHM])


@dataclass(frozen=True)
class SessionClaims:
    """Identity claims carried by a verified session token."""

    user_id: int
    external_user_id: str
    external_username: str
    issued_at: datetime
    expires_at: datetime


class SessionTokenCodec:
    """Signs and verifies session tokens and maps them to cookies."""

    def __init__(self, secret: str, lifetime: timedelta = DEFAULT_SESSION_LIFETIME):
        if not secret:
            raise ValueError("Session signing secret cannot be empty")
        self._secret = secret
        self.lifetime = lifetime

    @property
    def max_age(self) -> int:
        """Cookie Max-Age in seconds."""
        return int(self.lifetime.total_seconds())

    def create_token(self, user: User, now: datetime | None = None) -> str:
        """Create a signed session token for a user.

        Args:
            user: Authenticated local user
            now: Issuance time (defaults to now)

        Returns:
            Compact JWT string
        """
        issued = now or get_now()
        payload = {
            "userId": user.id,
            "xUserId": user.external_user_id,
            "xUsername": user.username,
            "iat": int(issued.timestamp()),
            "exp": int((issued + self.lifetime).timestamp()),
        }
        token = _jwt.encode({"alg": JWT_ALGORITHM}, payload, self._secret)
        return token.decode("utf-8") if isinstance(token, bytes) else token

    def verify_token(self, token: str | None, now: datetime | None = None) -> SessionClaims | None:
        """Verify a session token.

        Never raises: a bad signature, a malformed or expired token, or missing
        claims all return None.

        Args:
            token: Compact JWT string (may be None or empty)
            now: Verification time (defaults to now)

        Returns:
            SessionClaims if valid, None otherwise
        """
        if not token:
            return None

        checked_at = now or get_now()
        try:
            claims = _jwt.decode(
                token,
                self._secret,
                claims_options={"exp": {"essential": True}},
            )
            claims.validate(now=int(checked_at.timestamp()), leeway=0)

            return SessionClaims(
                user_id=int(claims["userId"]),
                external_user_id=str(claims["xUserId"]),
                external_username=str(claims.get("xUsername", "")),
                issued_at=datetime.fromtimestamp(int(claims.get("iat", 0)), UTC),
                expires_at=datetime.fromtimestamp(int(claims["exp"]), UTC),
            )
        except JoseError as e:
            logger.debug("Session token rejected: %s", e)
            return None
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            logger.debug("Malformed session token: %s", e)
            return None

    def set_session_cookie(self, response: Response, token: str, secure: bool) -> None:
        """Attach the session cookie to a response."""
        response.set_cookie(
            key=SESSION_COOKIE_NAME,
            value=token,
            max_age=self.max_age,
            path="/",
            secure=secure,
            httponly=True,
            samesite="lax",
        )

    @staticmethod
    def clear_session_cookie(response: Response, secure: bool) -> None:
        """Overwrite the session cookie with an empty, immediately expiring value."""
        response.set_cookie(
            key=SESSION_COOKIE_NAME,
            value="",
            max_age=0,
            path="/",
            secure=secure,
            httponly=True,
            samesite="lax",
        )
