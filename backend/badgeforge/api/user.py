"""Signed-in user status endpoint."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from badgeforge.dependencies import get_current_user
from badgeforge.dependencies.services import get_badge_policy, get_badge_repository
from badgeforge.models import User
from badgeforge.repositories import BadgeRepository
from badgeforge.schemas import BadgeState, StatusResponse, UserSummary
from badgeforge.services.badges import BadgePolicy
from badgeforge.utils.timezone import ensure_utc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["User"])


@router.get("/status", response_model=StatusResponse, response_model_exclude_none=True)
async def get_user_status(
    user: User | None = Depends(get_current_user),
    badges: BadgeRepository = Depends(get_badge_repository),
    policy: BadgePolicy = Depends(get_badge_policy),
):
    """Get the session's user and badge unlock state (session optional)."""
    if user is None:
        return StatusResponse(authenticated=False)

    try:
        awards = {award.badge_id: award for award in await badges.list_awards_for_user(user.id)}
        catalog = await badges.list_catalog()

        return StatusResponse(
            authenticated=True,
            user=UserSummary(
                username=f"@{user.username}",
                avatar_url=user.avatar_url,
                join_date=ensure_utc(user.first_login_at).isoformat(),
            ),
            og_period_active=await policy.founding_period_active(),
            badges=[
                BadgeState(
                    id=badge.badge_id,
                    unlocked=badge.badge_id in awards,
                    unlocked_at=(
                        ensure_utc(awards[badge.badge_id].unlocked_at).isoformat()
                        if badge.badge_id in awards
                        else None
                    ),
                )
                for badge in catalog
            ],
        )
    except Exception as e:
        logger.error(f"Status API error: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
