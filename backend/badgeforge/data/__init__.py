"""Data module for static catalog definitions."""

from badgeforge.data.badge_catalog import (
    BADGE_CATALOG,
    CLAIMABLE_BADGE_IDS,
    OG_BADGE_ID,
    BadgeDefinition,
)

__all__ = [
    "BADGE_CATALOG",
    "CLAIMABLE_BADGE_IDS",
    "OG_BADGE_ID",
    "BadgeDefinition",
]
