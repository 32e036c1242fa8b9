"""Maps an X profile onto a local user record."""

import logging
from datetime import datetime

from badgeforge.models import User
from badgeforge.repositories import UserRepository
from badgeforge.services.x_oauth import ExternalProfile
from badgeforge.utils.log_redaction import sanitize_for_log
from badgeforge.utils.timezone import get_now

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Creates a user on first login and refreshes profile fields afterwards."""

    def __init__(self, users: UserRepository):
        self.users = users

    async def resolve(
        self, profile: ExternalProfile, now: datetime | None = None
    ) -> tuple[User, bool]:
        """Find or create the local user for an X profile.

        Lookup-then-create is not atomic: two simultaneous first logins for the
        same account race, and the loser's insert fails on the unique
        ``external_user_id`` constraint instead of creating a second row.

        Args:
            profile: Profile fetched from the provider
            now: Login time, recorded as ``first_login_at`` for new users

        Returns:
            Tuple of (user, is_new_user)
        """
        user = await self.users.get_by_external_id(profile.external_user_id)

        if user is None:
            user = await self.users.create(
                external_user_id=profile.external_user_id,
                username=profile.username,
                avatar_url=profile.avatar_url,
                first_login_at=now or get_now(),
            )
            logger.info(
                "Created user %s for @%s", user.id, sanitize_for_log(profile.username)
            )
            return user, True

        # Provider data always wins for these fields
        user = await self.users.update_profile(user, profile.username, profile.avatar_url)
        logger.debug("Refreshed profile for user %s", user.id)
        return user, False
