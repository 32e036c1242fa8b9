"""X login flow: login, callback and logout legs.

State machine: Unauthenticated -> PendingAuthorization (PKCE cookies set) ->
Authenticated (session cookie set). Logout returns to Unauthenticated.

Pending authorizations are not stored server-side. The state and verifier ride
in two short-lived httpOnly cookies and are overwritten with expired values on
every callback response, so each pair is consumed by a single attempt from the
browser's point of view. A client that replays captured cookie values within
their 600 second lifetime is not detected here; the provider's single-use
authorization code is the remaining guard.

Every failure in the browser legs becomes a 302 to the error page with an
opaque ``?error=<tag>`` and never a raw error response.
"""

import hmac
import logging
from enum import StrEnum
from urllib.parse import urlencode

from fastapi import Request
from starlette.responses import RedirectResponse, Response

from badgeforge.config import Settings
from badgeforge.services.badges import BadgePolicy
from badgeforge.services.identity import IdentityResolver
from badgeforge.services.pkce import generate_pkce
from badgeforge.services.session_tokens import SessionTokenCodec
from badgeforge.services.x_oauth import OAuthExchangeError, XOAuthClient
from badgeforge.utils.log_redaction import sanitize_for_log
from badgeforge.utils.timezone import get_now

logger = logging.getLogger(__name__)

OAUTH_STATE_COOKIE = "oauth_state"
CODE_VERIFIER_COOKIE = "code_verifier"
PKCE_COOKIE_MAX_AGE = 600  # 10 minutes


class AuthErrorTag(StrEnum):
    """Failure classes reported to the browser on the error page."""

    CONFIG_ERROR = "config_error"
    LOGIN_FAILED = "login_failed"
    ACCESS_DENIED = "access_denied"
    NO_CODE = "no_code"
    INVALID_STATE = "invalid_state"
    MISSING_VERIFIER = "missing_verifier"
    TOKEN_FAILED = "token_failed"
    USER_FAILED = "user_failed"
    CALLBACK_FAILED = "callback_failed"


def is_secure_request(request: Request, settings: Settings) -> bool:
    """Whether cookies for this request should carry the Secure flag.

    Production always uses Secure cookies. Otherwise the scheme decides,
    honoring ``X-Forwarded-Proto`` from a TLS-terminating reverse proxy.
    """
    if settings.is_production:
        return True
    scheme = request.headers.get("x-forwarded-proto", request.url.scheme)
    return scheme.split(",")[0].strip().lower() == "https"


def _set_pkce_cookie(response: Response, key: str, value: str, secure: bool) -> None:
    response.set_cookie(
        key=key,
        value=value,
        max_age=PKCE_COOKIE_MAX_AGE,
        path="/",
        secure=secure,
        httponly=True,
        samesite="lax",
    )


def _clear_pkce_cookies(response: Response, secure: bool) -> None:
    for key in (OAUTH_STATE_COOKIE, CODE_VERIFIER_COOKIE):
        response.set_cookie(
            key=key,
            value="",
            max_age=0,
            path="/",
            secure=secure,
            httponly=True,
            samesite="lax",
        )


def _states_match(returned: str | None, stored: str | None) -> bool:
    """Strict, constant-time equality; absent or empty values never match."""
    if not returned or not stored:
        return False
    return hmac.compare_digest(returned.encode("utf-8"), stored.encode("utf-8"))


class AuthFlowController:
    """Orchestrates PKCE, code exchange, identity resolution and session issuance."""

    def __init__(
        self,
        settings: Settings,
        oauth: XOAuthClient,
        resolver: IdentityResolver,
        policy: BadgePolicy,
        codec: SessionTokenCodec | None,
    ):
        """
        Initialize the controller.

        Args:
            settings: Application settings
            oauth: X OAuth client
            resolver: Identity resolver backed by the user repository
            policy: Badge policy used for the founding-badge auto-award
            codec: Session token codec, None when no signing secret is configured
        """
        self.settings = settings
        self.oauth = oauth
        self.resolver = resolver
        self.policy = policy
        self.codec = codec

    def error_url(self, tag: AuthErrorTag) -> str:
        return f"{self.settings.error_page_url}?{urlencode({'error': tag.value})}"

    def _configured(self) -> bool:
        return self.settings.oauth_configured and self.codec is not None

    # ------------------------------------------------------------------
    # Login leg
    # ------------------------------------------------------------------

    def login(self, request: Request) -> RedirectResponse:
        """Start a login: set PKCE cookies and redirect to X."""
        if not self._configured():
            logger.error("X OAuth not configured: client id, redirect URI and JWT secret required")
            return RedirectResponse(self.error_url(AuthErrorTag.CONFIG_ERROR), status_code=302)

        secure = is_secure_request(request, self.settings)
        try:
            pkce = generate_pkce()
            response = RedirectResponse(self.oauth.build_authorization_url(pkce), status_code=302)
            _set_pkce_cookie(response, OAUTH_STATE_COOKIE, pkce.state, secure)
            _set_pkce_cookie(response, CODE_VERIFIER_COOKIE, pkce.code_verifier, secure)
        except Exception as e:
            logger.error(f"OAuth login error: {e}", exc_info=True)
            return RedirectResponse(self.error_url(AuthErrorTag.LOGIN_FAILED), status_code=302)

        logger.info(f"Initiating X login flow (state: {pkce.state[:8]}...)")
        return response

    # ------------------------------------------------------------------
    # Callback leg
    # ------------------------------------------------------------------

    def _finish(self, request: Request, url: str) -> RedirectResponse:
        """Redirect and consume the PKCE cookies."""
        response = RedirectResponse(url, status_code=302)
        _clear_pkce_cookies(response, is_secure_request(request, self.settings))
        return response

    def _fail(self, request: Request, tag: AuthErrorTag) -> RedirectResponse:
        return self._finish(request, self.error_url(tag))

    async def callback(
        self,
        request: Request,
        code: str | None,
        state: str | None,
        error: str | None = None,
    ) -> RedirectResponse:
        """Complete a login from the provider redirect.

        Never raises: any unexpected exception becomes ``callback_failed``.
        """
        try:
            return await self._complete(request, code, state, error)
        except Exception as e:
            logger.error(f"Callback fatal error: {e}", exc_info=True)
            return self._fail(request, AuthErrorTag.CALLBACK_FAILED)

    async def _complete(
        self,
        request: Request,
        code: str | None,
        state: str | None,
        error: str | None,
    ) -> RedirectResponse:
        if not self._configured():
            logger.error("Callback received but X OAuth is not configured")
            return self._fail(request, AuthErrorTag.CONFIG_ERROR)

        if error:
            logger.warning("OAuth error from X: %s", sanitize_for_log(error))
            return self._fail(request, AuthErrorTag.ACCESS_DENIED)

        if not code:
            logger.warning("No authorization code received")
            return self._fail(request, AuthErrorTag.NO_CODE)

        stored_state = request.cookies.get(OAUTH_STATE_COOKIE)
        code_verifier = request.cookies.get(CODE_VERIFIER_COOKIE)

        if not _states_match(state, stored_state):
            logger.warning(
                "Invalid OAuth state (returned: %s..., cookie present: %s)",
                sanitize_for_log((state or "")[:8]),
                bool(stored_state),
            )
            return self._fail(request, AuthErrorTag.INVALID_STATE)

        if not code_verifier:
            logger.warning("Missing code_verifier cookie")
            return self._fail(request, AuthErrorTag.MISSING_VERIFIER)

        try:
            token = await self.oauth.exchange_code_for_token(code, code_verifier)
        except OAuthExchangeError as e:
            logger.error(f"Failed to obtain access token ({type(e).__name__}): {e}")
            return self._fail(request, AuthErrorTag.TOKEN_FAILED)

        try:
            profile = await self.oauth.fetch_identity(token.access_token)
        except OAuthExchangeError as e:
            logger.error(f"Failed to fetch X user ({type(e).__name__}): {e}")
            return self._fail(request, AuthErrorTag.USER_FAILED)

        now = get_now()
        user, is_new_user = await self.resolver.resolve(profile, now)
        await self.policy.auto_award_founding(user, is_new_user, now)

        session_token = self.codec.create_token(user, now)
        response = self._finish(request, self.settings.landing_url)
        self.codec.set_session_cookie(
            response, session_token, is_secure_request(request, self.settings)
        )

        logger.info(
            "X login successful for user %s (@%s, new: %s)",
            user.id,
            sanitize_for_log(user.username),
            is_new_user,
        )
        return response

    # ------------------------------------------------------------------
    # Logout leg
    # ------------------------------------------------------------------

    def logout(self, request: Request) -> RedirectResponse:
        """Clear the session cookie. Needs no authentication."""
        response = RedirectResponse(self.settings.home_url, status_code=302)
        SessionTokenCodec.clear_session_cookie(
            response, is_secure_request(request, self.settings)
        )
        logger.info("User logged out")
        return response
