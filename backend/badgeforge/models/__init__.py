"""Database models for BadgeForge."""

from badgeforge.models.badge import Badge, UserBadge
from badgeforge.models.user import User

__all__ = [
    "Badge",
    "User",
    "UserBadge",
]
