"""Dependencies for FastAPI endpoints."""

from badgeforge.dependencies.auth import (
    AuthenticationRequired,
    get_current_user,
    get_session_claims,
    require_user,
)

__all__ = ["AuthenticationRequired", "get_current_user", "get_session_claims", "require_user"]
