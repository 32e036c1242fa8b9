"""Pydantic schemas for API requests and responses."""

from badgeforge.schemas.badge import (
    CatalogBadge,
    CatalogResponse,
    ClaimBadgeRequest,
    ClaimBadgeResponse,
    OGPeriod,
)
from badgeforge.schemas.user import BadgeState, StatusResponse, UserSummary

__all__ = [
    "BadgeState",
    "CatalogBadge",
    "CatalogResponse",
    "ClaimBadgeRequest",
    "ClaimBadgeResponse",
    "OGPeriod",
    "StatusResponse",
    "UserSummary",
]
