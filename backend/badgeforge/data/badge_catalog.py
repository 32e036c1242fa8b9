"""Badge catalog definitions for the Yellow Catz campaign.

The catalog is seeded into the ``badges`` table at startup. Badges are keyed
by a stable ``badge_id``; only badges listed in ``CLAIMABLE_BADGE_IDS`` can be
unlocked through the self-service claim endpoint.
"""

from dataclasses import dataclass

OG_BADGE_ID = "og"


@dataclass(frozen=True)
class BadgeDefinition:
    """Static definition of a catalog badge."""

    badge_id: str
    name: str
    description: str
    mission: str
    is_time_limited: bool = False


BADGE_CATALOG: tuple[BadgeDefinition, ...] = (
    BadgeDefinition(
        badge_id=OG_BADGE_ID,
        name="OG",
        description="First 24 hours founder",
        mission="Connect within the first 24 hours of launch",
        is_time_limited=True,
    ),
    BadgeDefinition(
        badge_id="badge_2",
        name="Supporter",
        description="Community supporter",
        mission="Like and RT the official tweet",
    ),
    BadgeDefinition(
        badge_id="badge_3",
        name="Yellow Army",
        description="Spread the yellow",
        mission="Post a tweet with your new PFP and #YELLOWCATZ",
    ),
    BadgeDefinition(
        badge_id="badge_4",
        name="Reach the Moon",
        description="You reached the moon!",
        mission="Complete the YellowGame challenge and click the green button",
    ),
    BadgeDefinition(
        badge_id="badge_5",
        name="X Hunter",
        description="Found the X secret",
        mission="Find and download the hidden YellowCatzX image",
    ),
    BadgeDefinition(
        badge_id="badge_6",
        name="M Hunter",
        description="Found the M secret",
        mission="Find and download the hidden YellowCatzM image",
    ),
    BadgeDefinition(badge_id="badge_7", name="???", description="Mystery badge", mission="???"),
    BadgeDefinition(badge_id="badge_8", name="???", description="Mystery badge", mission="???"),
    BadgeDefinition(badge_id="badge_9", name="???", description="Mystery badge", mission="???"),
    BadgeDefinition(badge_id="badge_10", name="???", description="Mystery badge", mission="???"),
)

# badge_9 and badge_10 are granted out of band, never self-service
CLAIMABLE_BADGE_IDS: frozenset[str] = frozenset(
    {OG_BADGE_ID, "badge_2", "badge_3", "badge_4", "badge_5", "badge_6", "badge_7", "badge_8"}
)

