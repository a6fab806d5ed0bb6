"""Family text posts data service (``family_posts`` table)."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Literal

from pydantic import BaseModel, Field

from agape.backend.client import BackendClient
from agape.backend.errors import BackendError, NotFoundError
from agape.models import FamilyPost

logger = logging.getLogger(__name__)

TABLE = "family_posts"

PostOrder = Literal["created_at", "updated_at"]


class TextPostInput(BaseModel):
    """A text update to import, dated relative to the import time."""

    content: str
    hashtags: list[str] = Field(default_factory=list)
    days_ago: int = Field(default=0, alias="daysAgo", ge=0)

    model_config = {"populate_by_name": True}


class FamilyPostsInput(BaseModel):
    """All text updates to import for one family."""

    family_id: str = Field(alias="familyId")
    family_name: str = Field(alias="familyName")
    posts: list[TextPostInput] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


@dataclass
class ImportSummary:
    """Outcome of a text post import."""

    imported: int = 0
    failed: int = 0
    families: int = 0
    missing_families: list[str] = field(default_factory=list)

    @property
    def average_per_family(self) -> float:
        return self.imported / self.families if self.families else 0.0


def timestamp_days_ago(days_ago: int, now: datetime | None = None) -> str:
    """ISO timestamp ``days_ago`` whole days before ``now``."""
    current = now or datetime.now(timezone.utc)
    return (current - timedelta(days=days_ago)).isoformat()


class PostsService:
    """Read and import family text posts."""

    def __init__(self, client: BackendClient):
        self.client = client

    async def fetch_all(
        self,
        limit: int | None = None,
        offset: int = 0,
        order_by: PostOrder = "created_at",
        ascending: bool = False,
    ) -> list[FamilyPost]:
        """Fetch text posts from all families.

        Args:
            limit: Maximum number of posts to return
            offset: Number of posts to skip (only applied with a limit)
            order_by: Column to order by
            ascending: Sort order (default newest first)

        Returns:
            List of posts

        Raises:
            BackendError: If the query fails
        """
        query = self.client.table(TABLE).select("*").order(order_by, ascending=ascending)
        if limit:
            query = query.range(offset, offset + limit - 1)

        try:
            result = await query.execute()
        except BackendError as e:
            logger.error(f"Error fetching posts: {e}")
            raise e.with_context("Failed to fetch posts") from e

        return [FamilyPost.from_row(row) for row in result.data or []]

    async def fetch_by_family(
        self,
        family_id: str,
        limit: int | None = None,
        order_by: PostOrder = "created_at",
        ascending: bool = False,
    ) -> list[FamilyPost]:
        """Fetch text posts for one family."""
        query = (
            self.client.table(TABLE)
            .select("*")
            .eq("family_id", family_id)
            .order(order_by, ascending=ascending)
        )
        if limit:
            query = query.limit(limit)

        try:
            result = await query.execute()
        except BackendError as e:
            logger.error(f"Error fetching posts by family: {e}")
            raise e.with_context("Failed to fetch posts for family") from e

        return [FamilyPost.from_row(row) for row in result.data or []]

    async def fetch_by_id(self, post_id: str) -> FamilyPost | None:
        """Fetch one post, or None if it doesn't exist."""
        try:
            result = await self.client.table(TABLE).select("*").eq("id", post_id).single().execute()
        except NotFoundError:
            return None
        except BackendError as e:
            logger.error(f"Error fetching post {post_id}: {e}")
            raise e.with_context("Failed to fetch post") from e

        if not result.data:
            return None
        return FamilyPost.from_row(result.data)

    async def count(self, family_id: str | None = None) -> int:
        """Total number of posts, optionally for one family."""
        query = self.client.table(TABLE).select("*", count="exact", head=True)
        if family_id:
            query = query.eq("family_id", family_id)

        try:
            result = await query.execute()
        except BackendError as e:
            logger.error(f"Error getting posts count: {e}")
            raise e.with_context("Failed to get posts count") from e

        return result.count or 0

    async def import_posts(
        self, batches: list[FamilyPostsInput], now: datetime | None = None
    ) -> ImportSummary:
        """Import text updates for several families.

        Families are verified up front; a mismatch is logged but does not stop
        the import. A failing post is logged and skipped.

        Raises:
            BackendError: If the families cannot be verified
        """
        summary = ImportSummary(families=len(batches))
        family_ids = [batch.family_id for batch in batches]

        try:
            result = await (
                self.client.table("crisis_families").select("id, name").in_("id", family_ids).execute()
            )
        except BackendError as e:
            raise e.with_context("Failed to verify families") from e

        found = {row["id"] for row in result.data or []}
        summary.missing_families = [fid for fid in family_ids if fid not in found]
        if summary.missing_families:
            logger.warning(
                f"Found {len(found)} families in database, expected {len(batches)}; "
                f"missing: {', '.join(summary.missing_families)}"
            )

        for batch in batches:
            for post in batch.posts:
                row = {
                    "family_id": batch.family_id,
                    "content": post.content,
                    "hashtags": post.hashtags,
                    "created_at": timestamp_days_ago(post.days_ago, now),
                }
                try:
                    await self.client.table(TABLE).insert(row).single().execute()
                except BackendError as e:
                    summary.failed += 1
                    logger.error(f"Error importing post for {batch.family_name}: {e} ({post.content[:50]!r})")
                    continue
                summary.imported += 1

        logger.info(f"Imported {summary.imported} posts for {summary.families} families")
        return summary
