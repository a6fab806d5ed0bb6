"""Points awarded for engagement, stored on the user's profile."""

import logging

from agape.auth.store import PROFILES_TABLE, AuthStore
from agape.backend.client import BackendClient
from agape.backend.errors import BackendError
from agape.config.schema import PointsConfig

logger = logging.getLogger(__name__)


class PointsService:
    """Adds (or removes) points on the signed-in user's profile."""

    def __init__(self, client: BackendClient, store: AuthStore, config: PointsConfig | None = None):
        self.client = client
        self.store = store
        self.config = config or PointsConfig()

    async def award_points(self, points: int) -> bool:
        """Add ``points`` (may be negative) to the signed-in user's total.

        The new total is based on the cached profile, then the profile is
        reloaded so the store reflects the stored value.

        Returns:
            True on success, False when signed out or the update fails
        """
        user = self.store.user
        if user is None:
            logger.error("No user logged in")
            return False

        current = user.profile.points_earned if user.profile else 0
        try:
            await (
                self.client.table(PROFILES_TABLE)
                .update({"points_earned": current + points})
                .eq("id", user.id)
                .execute()
            )
        except BackendError as e:
            logger.error(f"Error awarding points: {e}")
            return False

        await self.store.refresh_profile()
        return True

    async def award_like_points(self) -> bool:
        return await self.award_points(self.config.like)

    async def deduct_like_points(self) -> bool:
        """Take back the like points when content is unliked."""
        return await self.award_points(-self.config.like)

    async def award_share_points(self) -> bool:
        return await self.award_points(self.config.share)
