"""User status schemas."""

from pydantic import BaseModel, ConfigDict, Field


class UserSummary(BaseModel):
    """Public view of the signed-in user."""

    model_config = ConfigDict(populate_by_name=True)

    username: str  # "@handle"
    avatar_url: str | None = Field(None, serialization_alias="avatarUrl")
    join_date: str | None = Field(None, serialization_alias="joinDate")  # ISO timestamp


class BadgeState(BaseModel):
    """Unlock state of one catalog badge for the signed-in user."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    unlocked: bool
    unlocked_at: str | None = Field(None, serialization_alias="unlockedAt")


class StatusResponse(BaseModel):
    """Response of GET /api/user/status. Only ``authenticated`` is set for guests."""

    model_config = ConfigDict(populate_by_name=True)

    authenticated: bool
    user: UserSummary | None = None
    og_period_active: bool | None = Field(None, serialization_alias="ogPeriodActive")
    badges: list[BadgeState] | None = None
