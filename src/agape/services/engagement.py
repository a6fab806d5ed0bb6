"""Likes and shares (``post_engagements`` table, ``engagement_counts`` view)."""

import logging
import random
import uuid
from dataclasses import dataclass
from typing import Literal

from agape.backend.client import BackendClient
from agape.backend.errors import BackendError, NotAuthenticatedError, UniqueViolationError
from agape.models import EngagementCounts

logger = logging.getLogger(__name__)

TABLE = "post_engagements"
COUNTS_VIEW = "engagement_counts"
REFRESH_FUNCTION = "refresh_engagement_counts"

EngagementType = Literal["like", "share"]


@dataclass
class SeedSummary:
    """Totals written by :meth:`EngagementService.seed`."""

    families: int = 0
    likes: int = 0
    shares: int = 0

    @property
    def total(self) -> int:
        return self.likes + self.shares


class EngagementService:
    """Record and count likes and shares for families."""

    def __init__(self, client: BackendClient):
        self.client = client

    async def _require_user_id(self) -> str:
        user = await self.client.auth.get_user()
        if user is None:
            raise NotAuthenticatedError()
        return user.id

    async def has_user_liked(self, family_id: str) -> bool:
        """Whether the signed-in user likes a family. False when signed out or on error."""
        try:
            user = await self.client.auth.get_user()
            if user is None:
                return False
            result = await (
                self.client.table(TABLE)
                .select("id")
                .eq("family_id", family_id)
                .eq("user_id", user.id)
                .eq("engagement_type", "like")
                .maybe_single()
                .execute()
            )
        except BackendError as e:
            logger.error(f"Error checking like status: {e}")
            return False
        return result.data is not None

    async def toggle_like(self, family_id: str) -> bool:
        """Like the family, or remove the existing like.

        Returns:
            New like state (True if now liked)

        Raises:
            NotAuthenticatedError: If nobody is signed in
            BackendError: If the write fails
        """
        user_id = await self._require_user_id()

        if await self.has_user_liked(family_id):
            await (
                self.client.table(TABLE)
                .delete()
                .eq("family_id", family_id)
                .eq("user_id", user_id)
                .eq("engagement_type", "like")
                .execute()
            )
            return False

        await (
            self.client.table(TABLE)
            .insert(
                {"family_id": family_id, "user_id": user_id, "engagement_type": "like"},
                returning=False,
            )
            .execute()
        )
        return True

    async def record_share(self, family_id: str) -> None:
        """Record a share. Repeat shares hitting the unique constraint are ignored.

        Raises:
            NotAuthenticatedError: If nobody is signed in
            BackendError: If the insert fails for another reason
        """
        user_id = await self._require_user_id()
        try:
            await (
                self.client.table(TABLE)
                .insert(
                    {"family_id": family_id, "user_id": user_id, "engagement_type": "share"},
                    returning=False,
                )
                .execute()
            )
        except UniqueViolationError:
            logger.debug(f"Share for {family_id} already recorded")

    async def get_counts(self, family_id: str) -> EngagementCounts:
        """Like/share totals for one family; zeros on error.

        Reads the materialized view first and counts raw rows when the family
        is not in the view yet.
        """
        try:
            result = await (
                self.client.table(COUNTS_VIEW)
                .select("likes_count, shares_count")
                .eq("family_id", family_id)
                .maybe_single()
                .execute()
            )
            if result.data:
                return EngagementCounts(
                    likes_count=result.data.get("likes_count") or 0,
                    shares_count=result.data.get("shares_count") or 0,
                )

            rows = await (
                self.client.table(TABLE).select("engagement_type").eq("family_id", family_id).execute()
            )
        except BackendError as e:
            logger.error(f"Error getting engagement counts: {e}")
            return EngagementCounts()

        engagements = rows.data or []
        return EngagementCounts(
            likes_count=sum(1 for row in engagements if row["engagement_type"] == "like"),
            shares_count=sum(1 for row in engagements if row["engagement_type"] == "share"),
        )

    async def get_batch_counts(self, family_ids: list[str]) -> dict[str, EngagementCounts]:
        """Totals for many families. Every requested id is present; zeros when unknown or on error."""
        counts = {family_id: EngagementCounts() for family_id in family_ids}
        if not family_ids:
            return counts

        try:
            result = await (
                self.client.table(COUNTS_VIEW)
                .select("family_id, likes_count, shares_count")
                .in_("family_id", family_ids)
                .execute()
            )
        except BackendError as e:
            logger.error(f"Error getting batch engagement counts: {e}")
            return counts

        for row in result.data or []:
            counts[row["family_id"]] = EngagementCounts(
                likes_count=row.get("likes_count") or 0,
                shares_count=row.get("shares_count") or 0,
            )
        return counts

    async def get_batch_like_states(self, family_ids: list[str]) -> dict[str, bool]:
        """Which of the families the signed-in user likes. All False when signed out or on error."""
        states = {family_id: False for family_id in family_ids}
        if not family_ids:
            return states

        try:
            user = await self.client.auth.get_user()
            if user is None:
                return states
            result = await (
                self.client.table(TABLE)
                .select("family_id")
                .eq("user_id", user.id)
                .eq("engagement_type", "like")
                .in_("family_id", family_ids)
                .execute()
            )
        except BackendError as e:
            logger.error(f"Error getting batch like states: {e}")
            return states

        liked = {row["family_id"] for row in result.data or []}
        return {family_id: family_id in liked for family_id in family_ids}

    async def refresh_counts(self) -> bool:
        """Refresh the counts view. Failures are logged, not raised."""
        try:
            await self.client.rpc(REFRESH_FUNCTION)
        except BackendError as e:
            logger.error(f"Error refreshing engagement counts: {e}")
            return False
        return True

    async def seed(
        self,
        likes_range: tuple[int, int] = (50, 500),
        shares_range: tuple[int, int] = (10, 100),
        batch_size: int = 1000,
        rng: random.Random | None = None,
    ) -> SeedSummary:
        """Fill every family with random demo engagement from fake users.

        Raises:
            BackendError: If families cannot be read or a batch insert fails
        """
        rng = rng or random.Random()

        try:
            result = await self.client.table("crisis_families").select("id, name").execute()
        except BackendError as e:
            raise e.with_context("Failed to fetch families") from e

        families = result.data or []
        summary = SeedSummary(families=len(families))
        records: list[dict[str, str]] = []

        for family in families:
            likes = rng.randint(*likes_range)
            shares = rng.randint(*shares_range)
            logger.info(f"{family['name']}: {likes} likes, {shares} shares")
            summary.likes += likes
            summary.shares += shares
            records.extend(_fake_engagement(family["id"], "like", likes, rng))
            records.extend(_fake_engagement(family["id"], "share", shares, rng))

        for start in range(0, len(records), batch_size):
            batch = records[start : start + batch_size]
            try:
                await self.client.table(TABLE).insert(batch, returning=False).execute()
            except BackendError as e:
                raise e.with_context(f"Failed to insert batch {start // batch_size + 1}") from e
            logger.debug(f"Inserted {min(start + batch_size, len(records))}/{len(records)} engagement records")

        if records:
            await self.refresh_counts()
        return summary


def _fake_engagement(
    family_id: str, engagement_type: EngagementType, count: int, rng: random.Random
) -> list[dict[str, str]]:
    return [
        {
            "user_id": str(uuid.UUID(int=rng.getrandbits(128), version=4)),
            "family_id": family_id,
            "engagement_type": engagement_type,
        }
        for _ in range(count)
    ]
