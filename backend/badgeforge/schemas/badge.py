"""Badge claim and catalog schemas."""

from pydantic import BaseModel, ConfigDict, Field


class ClaimBadgeRequest(BaseModel):
    """Body of POST /api/badge."""

    model_config = ConfigDict(populate_by_name=True)

    badge_id: str | None = Field(None, alias="badgeId")


class ClaimBadgeResponse(BaseModel):
    """Successful claim response."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    badge_id: str = Field(..., serialization_alias="badgeId")


class CatalogBadge(BaseModel):
    """Catalog entry as exposed to the frontend."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    description: str | None = None
    mission: str | None = None
    is_time_limited: bool = Field(False, serialization_alias="isTimeLimited")
    claimable: bool = False


class OGPeriod(BaseModel):
    """Founding window status."""

    model_config = ConfigDict(populate_by_name=True)

    active: bool
    launch_date: str | None = Field(None, serialization_alias="launchDate")


class CatalogResponse(BaseModel):
    """Response of GET /api/badges."""

    model_config = ConfigDict(populate_by_name=True)

    badges: list[CatalogBadge]
    og_period: OGPeriod = Field(..., serialization_alias="ogPeriod")
