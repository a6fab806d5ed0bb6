"""Crisis families data service (``crisis_families`` table)."""

import logging
import re
from typing import Any, Literal

from agape.backend.client import BackendClient
from agape.backend.errors import BackendError, NotFoundError
from agape.models import CrisisFamily, FamilyInput

logger = logging.getLogger(__name__)

TABLE = "crisis_families"

FamilyOrder = Literal["created_at", "name", "fundraising_current"]

# Characters with meaning inside a PostgREST or() expression
_FILTER_RESERVED = re.compile(r"[,(){}]")


class FamiliesService:
    """Read and add crisis family profiles."""

    def __init__(self, client: BackendClient):
        self.client = client

    async def fetch_all(
        self,
        limit: int | None = None,
        offset: int = 0,
        verified: bool | None = None,
        order_by: FamilyOrder = "created_at",
        ascending: bool = False,
    ) -> list[CrisisFamily]:
        """Fetch crisis families.

        Args:
            limit: Maximum number of families to return
            offset: Number of families to skip (only applied with a limit)
            verified: Filter by verification status
            order_by: Column to order by
            ascending: Sort order (default newest/largest first)

        Returns:
            List of families

        Raises:
            BackendError: If the query fails
        """
        query = self.client.table(TABLE).select("*")
        if verified is not None:
            query = query.eq("verified", verified)
        query = query.order(order_by, ascending=ascending)
        if limit:
            query = query.range(offset, offset + limit - 1)

        try:
            result = await query.execute()
        except BackendError as e:
            logger.error(f"Error fetching families: {e}")
            raise e.with_context("Failed to fetch families") from e

        return [CrisisFamily.from_row(row) for row in result.data or []]

    async def fetch_by_id(self, family_id: str) -> CrisisFamily | None:
        """Fetch one family, or None if it doesn't exist."""
        try:
            result = await self.client.table(TABLE).select("*").eq("id", family_id).single().execute()
        except NotFoundError:
            return None
        except BackendError as e:
            logger.error(f"Error fetching family {family_id}: {e}")
            raise e.with_context("Failed to fetch family") from e

        if not result.data:
            return None
        return CrisisFamily.from_row(result.data)

    async def fetch_with_videos(self, limit: int | None = None) -> list[CrisisFamily]:
        """Fetch families that have a video, newest first."""
        query = (
            self.client.table(TABLE)
            .select("*")
            .not_("video_url", "is", None)
            .order("created_at", ascending=False)
        )
        if limit:
            query = query.limit(limit)

        try:
            result = await query.execute()
        except BackendError as e:
            logger.error(f"Error fetching families with videos: {e}")
            raise e.with_context("Failed to fetch families with videos") from e

        return [CrisisFamily.from_row(row) for row in result.data or []]

    async def search(self, term: str) -> list[CrisisFamily]:
        """Search families by name, location (case-insensitive) or exact tag."""
        term = _FILTER_RESERVED.sub("", term).strip()
        if not term:
            return []

        expression = f"name.ilike.%{term}%,location.ilike.%{term}%,tags.cs.{{{term}}}"
        try:
            result = await (
                self.client.table(TABLE)
                .select("*")
                .or_(expression)
                .order("created_at", ascending=False)
                .execute()
            )
        except BackendError as e:
            logger.error(f"Error searching families: {e}")
            raise e.with_context("Failed to search families") from e

        return [CrisisFamily.from_row(row) for row in result.data or []]

    async def count(self, verified: bool | None = None) -> int:
        """Total number of families, optionally filtered by verification."""
        query = self.client.table(TABLE).select("*", count="exact", head=True)
        if verified is not None:
            query = query.eq("verified", verified)

        try:
            result = await query.execute()
        except BackendError as e:
            logger.error(f"Error getting families count: {e}")
            raise e.with_context("Failed to get families count") from e

        return result.count or 0

    async def add(self, family: FamilyInput) -> CrisisFamily:
        """Insert a new family and return the stored record."""
        logger.info(f"Adding family {family.name} ({family.location})")
        try:
            result = await self.client.table(TABLE).insert([family.to_row()]).single().execute()
        except BackendError as e:
            logger.error(f"Error inserting family: {e}")
            raise e.with_context("Failed to add family") from e

        return CrisisFamily.from_row(result.data)


REQUIRED_FAMILY_FIELDS = (
    "name",
    "location",
    "situation",
    "story",
    "profile_image_url",
    "fundraising_link",
    "fundraising_goal",
    "fundraising_current",
    "tags",
    "needs",
)


def validate_family_data(data: Any) -> list[str]:
    """List the problems with raw family JSON (empty list means valid)."""
    if not isinstance(data, dict):
        return ["Family data must be a JSON object"]

    problems = [f"Missing required field: {field}" for field in REQUIRED_FAMILY_FIELDS if field not in data]

    if "tags" in data and not isinstance(data["tags"], list):
        problems.append("tags must be an array of strings")

    needs = data.get("needs")
    if "needs" in data and not isinstance(needs, list):
        problems.append("needs must be an array of objects")
    elif isinstance(needs, list):
        for need in needs:
            if not isinstance(need, dict) or not all(
                need.get(key) for key in ("id", "icon", "title", "description")
            ):
                problems.append("Each need must have id, icon, title, and description")
                break

    return problems


EXAMPLE_FAMILY = {
    "name": "The Johnson Family",
    "location": "Aleppo, Syria",
    "situation": "Displaced by war",
    "story": (
        "We fled our home in Aleppo in 2016 when the bombings intensified. Now living in a "
        "refugee camp with limited resources, we dream of rebuilding our lives and providing "
        "education for our children."
    ),
    "profile_image_url": "https://your-project.supabase.co/storage/v1/object/public/family-images/johnson-profile.jpg",
    "cover_image_url": "https://your-project.supabase.co/storage/v1/object/public/family-images/johnson-cover.jpg",
    "video_url": "https://your-project.supabase.co/storage/v1/object/public/family-videos/johnson-story.mp4",
    "fundraising_link": "https://gofundme.com/johnson-family",
    "fundraising_goal": 15000,
    "fundraising_current": 5800,
    "verified": True,
    "tags": ["#Syria", "#War", "#Hope", "#Education"],
    "needs": [
        {"id": "1", "icon": "🍲", "title": "Emergency Food Supply", "description": "Basic nutrition for family of 5"},
        {"id": "2", "icon": "🏥", "title": "Medical Care", "description": "Access to healthcare and medicine"},
        {"id": "3", "icon": "📚", "title": "Education", "description": "School supplies and tuition for children"},
    ],
}
