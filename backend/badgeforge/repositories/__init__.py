"""Repository pattern implementation for database queries."""

from badgeforge.repositories.badge_repository import BadgeRepository
from badgeforge.repositories.user_repository import UserRepository

__all__ = [
    "BadgeRepository",
    "UserRepository",
]
