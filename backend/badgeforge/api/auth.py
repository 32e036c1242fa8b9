"""X login endpoints: login, callback and logout."""

import logging

from fastapi import APIRouter, Depends, Request
from starlette.responses import RedirectResponse

from badgeforge.config import settings
from badgeforge.dependencies.services import get_auth_flow
from badgeforge.services.auth_flow import AuthFlowController
from badgeforge.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.get("/login")
@limiter.limit(settings.rate_limit_login)
async def login(
    request: Request,
    flow: AuthFlowController = Depends(get_auth_flow),
) -> RedirectResponse:
    """Initiate the X OAuth2/PKCE flow (public endpoint).

    Sets the ``oauth_state`` and ``code_verifier`` cookies and redirects to X.
    """
    return flow.login(request)


@router.get("/callback")
@limiter.limit(settings.rate_limit_login)
async def callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    flow: AuthFlowController = Depends(get_auth_flow),
) -> RedirectResponse:
    """Handle the provider redirect (public endpoint).

    Always answers with a redirect: the landing page on success, the error
    page with an ``error`` tag otherwise.
    """
    return await flow.callback(request, code=code, state=state, error=error)


@router.api_route("/logout", methods=["GET", "POST"])
async def logout(
    request: Request,
    flow: AuthFlowController = Depends(get_auth_flow),
) -> RedirectResponse:
    """Clear the session cookie and go home. Works without a session."""
    return flow.logout(request)
