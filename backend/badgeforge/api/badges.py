"""Badge catalog and claim endpoints."""

import logging

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from badgeforge.config import Settings, get_settings, settings
from badgeforge.dependencies import require_user
from badgeforge.dependencies.services import get_badge_policy, get_badge_repository
from badgeforge.models import User
from badgeforge.repositories import BadgeRepository
from badgeforge.schemas import (
    CatalogBadge,
    CatalogResponse,
    ClaimBadgeRequest,
    ClaimBadgeResponse,
    OGPeriod,
)
from badgeforge.services.badges import BadgeClaimRejected, BadgePolicy
from badgeforge.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Badges"])


@router.post("/badge", response_model=ClaimBadgeResponse)
@limiter.limit(settings.rate_limit_claim)
async def claim_badge(
    request: Request,
    payload: ClaimBadgeRequest | None = Body(None),
    user: User = Depends(require_user),
    policy: BadgePolicy = Depends(get_badge_policy),
):
    """Claim a self-service badge for the signed-in user.

    Rejections (banned, unknown or non-claimable badge, already claimed,
    window closed) are answered as ``{"error": ...}`` by the app's
    BadgeClaimRejected handler.
    """
    badge_id = ((payload.badge_id if payload else None) or "").strip()
    if not badge_id:
        return JSONResponse(status_code=400, content={"error": "Missing badgeId"})

    try:
        award = await policy.claim(user, badge_id)
    except BadgeClaimRejected:
        raise
    except Exception as e:
        logger.error(f"Badge claim error: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Server error"})

    return ClaimBadgeResponse(message=f"Badge {award.badge_id} unlocked!", badge_id=award.badge_id)


@router.get("/badges", response_model=CatalogResponse)
async def list_badges(
    badges: BadgeRepository = Depends(get_badge_repository),
    policy: BadgePolicy = Depends(get_badge_policy),
    app_settings: Settings = Depends(get_settings),
):
    """List the badge catalog and whether the founding window is open (public)."""
    catalog = await badges.list_catalog()
    launch = app_settings.launch_date

    return CatalogResponse(
        badges=[
            CatalogBadge(
                id=badge.badge_id,
                name=badge.name,
                description=badge.description,
                mission=badge.mission,
                is_time_limited=badge.is_time_limited,
                claimable=badge.badge_id in policy.claimable,
            )
            for badge in catalog
        ],
        og_period=OGPeriod(
            active=await policy.founding_period_active(),
            launch_date=launch.isoformat() if launch else None,
        ),
    )
