"""X (Twitter) OAuth2 client: authorization URL, code exchange and profile fetch.

Upstream failures are raised as ``OAuthExchangeError`` subclasses so callers can
log the precise cause and still map every variant to a single browser-facing
error tag. Provider response bodies are only ever written to the log, redacted.
"""

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import httpx

from badgeforge.config import Settings
from badgeforge.services.pkce import PKCEPair
from badgeforge.utils.log_redaction import redact_sensitive_data, sanitize_for_log

logger = logging.getLogger(__name__)


class OAuthExchangeError(Exception):
    """An upstream OAuth call did not produce a usable result."""

    pass


class TokenExchangeFailed(OAuthExchangeError):
    """Token endpoint answered with an error or an unusable payload."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ProfileFetchFailed(OAuthExchangeError):
    """Profile endpoint answered with an error or an unusable payload."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class OAuthTransportError(OAuthExchangeError):
    """Connection failure or timeout talking to the provider."""

    pass


@dataclass(frozen=True)
class TokenResponse:
    """Successful token endpoint response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int | None = None
    scope: str | None = None
    refresh_token: str | None = None


@dataclass(frozen=True)
class ExternalProfile:
    """Public profile of the authenticated X account."""

    external_user_id: str
    username: str
    avatar_url: str | None = None
    name: str | None = None


def _response_excerpt(response: httpx.Response) -> Any:
    """Best-effort, redacted rendering of a provider error body for logs."""
    try:
        body: Any = response.json()
    except ValueError:
        body = sanitize_for_log(response.text)
    return redact_sensitive_data(body)


class XOAuthClient:
    """OAuth2 authorization-code + PKCE client for X."""

    PROFILE_FIELDS = "profile_image_url"

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        """
        Initialize the client.

        Args:
            settings: Application settings holding client credentials and endpoints
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.settings = settings
        self._transport = transport

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.oauth_http_timeout),
            transport=self._transport,
        )

    def build_authorization_url(self, pkce: PKCEPair) -> str:
        """Build the provider authorization URL for one login attempt."""
        params = {
            "response_type": "code",
            "client_id": self.settings.x_client_id,
            "redirect_uri": self.settings.x_redirect_uri,
            "scope": self.settings.x_scopes,
            "state": pkce.state,
            "code_challenge": pkce.code_challenge,
            "code_challenge_method": pkce.code_challenge_method,
        }
        return f"{self.settings.x_authorize_url}?{urlencode(params)}"

    async def exchange_code_for_token(self, code: str, code_verifier: str) -> TokenResponse:
        """Exchange an authorization code for an access token.

        A configured client secret makes this a confidential client using HTTP
        Basic authentication; otherwise ``client_id`` is sent in the form body.

        Args:
            code: Authorization code from the callback
            code_verifier: PKCE verifier matching the challenge sent at login

        Returns:
            TokenResponse with the access token

        Raises:
            TokenExchangeFailed: Non-success status or payload without access_token
            OAuthTransportError: Timeout or connection failure
        """
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.settings.x_redirect_uri,
            "code_verifier": code_verifier,
        }
        auth = None
        if self.settings.x_client_secret:
            auth = httpx.BasicAuth(self.settings.x_client_id, self.settings.x_client_secret)
        else:
            data["client_id"] = self.settings.x_client_id

        try:
            async with self._http_client() as client:
                response = await client.post(
                    self.settings.x_token_url,
                    data=data,
                    auth=auth,
                    headers={"Accept": "application/json"},
                )
        except httpx.TimeoutException as e:
            logger.error("Token exchange request timeout")
            raise OAuthTransportError("Token exchange timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Cannot connect to token endpoint: {e}")
            raise OAuthTransportError(f"Token exchange transport failure: {e}") from e

        if not response.is_success:
            logger.error(
                "Token exchange failed: %s %s", response.status_code, _response_excerpt(response)
            )
            raise TokenExchangeFailed("Token endpoint returned an error", response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            logger.error("Token endpoint returned a non-JSON body")
            raise TokenExchangeFailed("Invalid token response", response.status_code) from e

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not access_token:
            logger.error("Token endpoint response has no access_token")
            raise TokenExchangeFailed("No access token in response", response.status_code)

        logger.info("Successfully exchanged code for tokens")
        return TokenResponse(
            access_token=access_token,
            token_type=payload.get("token_type", "bearer"),
            expires_in=payload.get("expires_in"),
            scope=payload.get("scope"),
            refresh_token=payload.get("refresh_token"),
        )

    async def fetch_identity(self, access_token: str) -> ExternalProfile:
        """Fetch the authenticated account's public profile.

        Args:
            access_token: Bearer token from the exchange

        Returns:
            ExternalProfile with id, handle and avatar

        Raises:
            ProfileFetchFailed: Non-success status or payload without an id/username
            OAuthTransportError: Timeout or connection failure
        """
        try:
            async with self._http_client() as client:
                response = await client.get(
                    self.settings.x_userinfo_url,
                    params={"user.fields": self.PROFILE_FIELDS},
                    headers={"Authorization": f"Bearer {access_token}"},
                )
        except httpx.TimeoutException as e:
            logger.error("Profile request timeout")
            raise OAuthTransportError("Profile fetch timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Cannot connect to profile endpoint: {e}")
            raise OAuthTransportError(f"Profile fetch transport failure: {e}") from e

        if not response.is_success:
            logger.error(
                "Profile fetch failed: %s %s", response.status_code, _response_excerpt(response)
            )
            raise ProfileFetchFailed("Profile endpoint returned an error", response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            logger.error("Profile endpoint returned a non-JSON body")
            raise ProfileFetchFailed("Invalid profile response", response.status_code) from e

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict) or not data.get("id") or not data.get("username"):
            logger.error("Profile response missing data.id or data.username")
            raise ProfileFetchFailed("Incomplete profile", response.status_code)

        logger.info("Fetched X profile for @%s", sanitize_for_log(data["username"]))
        return ExternalProfile(
            external_user_id=str(data["id"]),
            username=str(data["username"]),
            avatar_url=data.get("profile_image_url") or None,
            name=data.get("name"),
        )
