"""Badge claim policy and the time-limited founding ("OG") window."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from badgeforge.data import CLAIMABLE_BADGE_IDS, OG_BADGE_ID
from badgeforge.models import Badge, User
from badgeforge.repositories import BadgeRepository
from badgeforge.utils.timezone import ensure_utc, get_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FoundingWindow:
    """Closed time interval ``[start, end]`` during which a time-limited badge is open.

    A window with no start or end is never active.
    """

    start: datetime | None = None
    end: datetime | None = None

    @classmethod
    def from_launch(cls, launch: datetime | None, hours: int = 24) -> "FoundingWindow":
        if launch is None:
            return cls()
        launch = ensure_utc(launch)
        return cls(start=launch, end=launch + timedelta(hours=hours))

    @property
    def configured(self) -> bool:
        return self.start is not None and self.end is not None

    def contains(self, now: datetime) -> bool:
        if self.start is None or self.end is None:
            return False
        now = ensure_utc(now)
        return ensure_utc(self.start) <= now <= ensure_utc(self.end)


class RejectionReason(Enum):
    """Why a claim was refused, with the HTTP status and message shown to the user."""

    BANNED = (403, "User is banned")
    UNKNOWN_BADGE = (404, "Unknown badge")
    NOT_CLAIMABLE = (400, "This badge cannot be claimed here")
    ALREADY_CLAIMED = (400, "Badge already claimed")
    WINDOW_CLOSED = (400, "OG badge period has ended. You missed it.")

    @property
    def status_code(self) -> int:
        return self.value[0]

    @property
    def message(self) -> str:
        return self.value[1]


class BadgeClaimRejected(Exception):
    """A claim was refused for an expected, user-facing reason."""

    def __init__(self, reason: RejectionReason, badge_id: str):
        super().__init__(reason.message)
        self.reason = reason
        self.badge_id = badge_id


@dataclass(frozen=True)
class BadgeAward:
    """Successful claim outcome."""

    badge_id: str
    user_id: int
    unlocked_at: datetime


class BadgePolicy:
    """Decides which badges a user may hold and records awards."""

    def __init__(
        self,
        badges: BadgeRepository,
        window: FoundingWindow,
        claimable: frozenset[str] = CLAIMABLE_BADGE_IDS,
    ):
        """
        Initialize the policy.

        Args:
            badges: Badge repository (catalog and awards)
            window: Configured founding window, used for time-limited badges
                that carry no window of their own
            claimable: Badge ids that may be claimed through the claim endpoint
        """
        self.badges = badges
        self.window = window
        self.claimable = claimable

    def window_for(self, badge: Badge) -> FoundingWindow:
        if badge.window_start is not None and badge.window_end is not None:
            return FoundingWindow(start=badge.window_start, end=badge.window_end)
        return self.window

    def is_eligible(self, badge: Badge, user: User, now: datetime) -> bool:
        """Time-limited badges are eligible only inside their window; others always."""
        if not badge.is_time_limited:
            return True
        return self.window_for(badge).contains(now)

    async def founding_period_active(self, now: datetime | None = None) -> bool:
        """Whether the OG badge can currently be earned."""
        badge = await self.badges.get_badge(OG_BADGE_ID)
        window = self.window_for(badge) if badge is not None else self.window
        return window.contains(now or get_now())

    async def claim(self, user: User, badge_id: str, now: datetime | None = None) -> BadgeAward:
        """Claim a badge on behalf of a user.

        Checks run in a fixed order: ban, catalog membership and claimability,
        existing award, time window. The final insert is insert-if-absent, so
        a concurrent duplicate claim surfaces as ALREADY_CLAIMED rather than a
        second row.

        Args:
            user: Claiming user
            badge_id: Catalog badge id
            now: Claim time (defaults to now)

        Returns:
            BadgeAward for the newly unlocked badge

        Raises:
            BadgeClaimRejected: With the reason the claim was refused
        """
        now = now or get_now()

        if user.is_banned:
            raise BadgeClaimRejected(RejectionReason.BANNED, badge_id)

        badge = await self.badges.get_badge(badge_id)
        if badge is None:
            raise BadgeClaimRejected(RejectionReason.UNKNOWN_BADGE, badge_id)
        if badge_id not in self.claimable:
            raise BadgeClaimRejected(RejectionReason.NOT_CLAIMABLE, badge_id)

        if await self.badges.has_award(user.id, badge_id):
            raise BadgeClaimRejected(RejectionReason.ALREADY_CLAIMED, badge_id)

        if not self.is_eligible(badge, user, now):
            raise BadgeClaimRejected(RejectionReason.WINDOW_CLOSED, badge_id)

        inserted = await self.badges.insert_award_if_absent(user.id, badge_id, now)
        if not inserted:
            raise BadgeClaimRejected(RejectionReason.ALREADY_CLAIMED, badge_id)

        logger.info("User %s unlocked badge %s", user.id, badge_id)
        return BadgeAward(badge_id=badge_id, user_id=user.id, unlocked_at=now)

    async def auto_award_founding(
        self, user: User, is_new_user: bool, now: datetime | None = None
    ) -> bool:
        """Grant the OG badge on a first-ever login inside the founding window.

        Returns:
            True if the badge was awarded by this call
        """
        if not is_new_user or user.is_banned:
            return False

        now = now or get_now()
        badge = await self.badges.get_badge(OG_BADGE_ID)
        if badge is None or not self.is_eligible(badge, user, now):
            return False

        awarded = await self.badges.insert_award_if_absent(user.id, OG_BADGE_ID, now)
        if awarded:
            logger.info("Auto-awarded %s badge to new user %s", OG_BADGE_ID, user.id)
        return awarded
