"""Home feed: family media posts and text updates merged into one timeline.

Each page asks for half a page of families and half a page of text posts,
fetched concurrently, decorates them with engagement counts and the user's
like state, and sorts the result newest first. Likes and shares update the
in-memory posts immediately and roll back when the backend rejects a like.
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone

from agape.backend.errors import BackendError
from agape.models import CrisisFamily, EngagementCounts, FamilyPost, FeedPost
from agape.services.engagement import EngagementService
from agape.services.families import FamiliesService
from agape.services.points import PointsService
from agape.services.posts import PostsService

logger = logging.getLogger(__name__)

CAPTION_LENGTH = 200
LOAD_ERROR = "Failed to load posts. Please try again."


@dataclass
class PointsAward:
    """Points just earned, for a toast or similar notice."""

    points: int
    reason: str


@dataclass
class FamilyDetail:
    family: CrisisFamily | None
    posts: list[FamilyPost]


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def truncate_caption(story: str, length: int = CAPTION_LENGTH) -> str:
    if len(story) <= length:
        return story
    return story[:length] + "..."


def family_to_post(family: CrisisFamily, counts: EngagementCounts, liked: bool) -> FeedPost:
    """A family's profile shown as a photo or video post."""
    has_video = bool(family.video_url)
    return FeedPost(
        id=f"post-{family.id}",
        family_id=family.id,
        family_name=family.name,
        family_image=family.profile_image,
        type="video" if has_video else "photo",
        media_url=family.video_url if has_video else (family.cover_image or family.profile_image),
        caption=truncate_caption(family.story),
        hashtags=family.tags,
        likes=counts.likes_count,
        shares=counts.shares_count,
        liked=liked,
        created_at=family.created_at,
        post_type="family",
    )


def text_post_to_post(
    post: FamilyPost, family: CrisisFamily, counts: EngagementCounts, liked: bool
) -> FeedPost:
    """A text update shown with its family's name and picture."""
    return FeedPost(
        id=post.id,
        family_id=post.family_id,
        family_name=family.name,
        family_image=family.profile_image,
        type="text",
        content=post.content,
        caption="",
        hashtags=post.hashtags,
        likes=counts.likes_count,
        shares=counts.shares_count,
        liked=liked,
        created_at=post.created_at,
        post_type="update",
    )


def share_message(post: FeedPost) -> tuple[str, str]:
    """Message and title for sharing a post."""
    body = post.caption or post.content or ""
    return (
        f"Check out {post.family_name}'s story on Agape!\n\n{body}",
        f"Support {post.family_name}",
    )


class FeedService:
    """Paginated feed state plus like/share actions."""

    def __init__(
        self,
        families: FamiliesService,
        posts: PostsService,
        engagement: EngagementService,
        points: PointsService,
        page_size: int = 10,
    ):
        self.families = families
        self.posts_service = posts
        self.engagement = engagement
        self.points = points
        self.page_size = page_size

        self.posts: list[FeedPost] = []
        self.offset = 0
        self.has_more = True
        self.loading = False
        self.loading_more = False
        self.error: str | None = None

    @property
    def half_page(self) -> int:
        return math.ceil(self.page_size / 2)

    async def _build_page(self, offset: int) -> tuple[list[FeedPost], bool]:
        families, text_posts = await asyncio.gather(
            self.families.fetch_all(limit=self.half_page, offset=offset, order_by="created_at"),
            self.posts_service.fetch_all(limit=self.half_page, offset=offset, order_by="created_at"),
        )

        family_ids = list(dict.fromkeys([f.id for f in families] + [p.family_id for p in text_posts]))
        counts, like_states = await asyncio.gather(
            self.engagement.get_batch_counts(family_ids),
            self.engagement.get_batch_like_states(family_ids),
        )

        # Text posts need their family's name and picture
        known = {family.id: family for family in families}
        missing_ids = list(dict.fromkeys(p.family_id for p in text_posts if p.family_id not in known))
        fetched = await asyncio.gather(*(self.families.fetch_by_id(fid) for fid in missing_ids))
        known.update({family.id: family for family in fetched if family is not None})

        page = [
            family_to_post(
                family,
                counts.get(family.id, EngagementCounts()),
                like_states.get(family.id, False),
            )
            for family in families
        ]
        for post in text_posts:
            family = known.get(post.family_id)
            if family is None:
                logger.warning(f"Dropping post {post.id}: family {post.family_id} not found")
                continue
            page.append(
                text_post_to_post(
                    post,
                    family,
                    counts.get(post.family_id, EngagementCounts()),
                    like_states.get(post.family_id, False),
                )
            )

        page.sort(key=lambda p: parse_timestamp(p.created_at), reverse=True)
        has_more = len(families) == self.half_page or len(text_posts) == self.half_page
        return page, has_more

    async def load(self, loading_more: bool = False) -> list[FeedPost]:
        """Load the first page (refresh) or the next page.

        Errors are kept in :attr:`error`; the posts already shown stay.

        Returns:
            The full list of posts after loading
        """
        if loading_more:
            self.loading_more = True
        else:
            self.loading = True
            self.error = None

        try:
            stream_offset = self.offset // 2 if loading_more else 0
            page, has_more = await self._build_page(stream_offset)
        except BackendError as e:
            logger.error(f"Error loading posts: {e}")
            self.error = LOAD_ERROR
        else:
            if loading_more:
                self.posts = self.posts + page
                self.offset += self.page_size
            else:
                self.posts = page
                self.offset = self.page_size
            self.has_more = has_more
        finally:
            self.loading = False
            self.loading_more = False

        return self.posts

    async def refresh(self) -> list[FeedPost]:
        return await self.load(loading_more=False)

    async def load_more(self) -> list[FeedPost]:
        """Load the next page unless there is none or a load is running."""
        if self.has_more and not self.loading_more and not self.loading:
            await self.load(loading_more=True)
        return self.posts

    def _find(self, post_id: str) -> FeedPost | None:
        return next((p for p in self.posts if p.id == post_id), None)

    def _replace(self, post_id: str, **changes) -> None:
        self.posts = [p.model_copy(update=changes) if p.id == post_id else p for p in self.posts]

    async def like(self, post: FeedPost) -> PointsAward | None:
        """Toggle the like on a post.

        The post flips at once; if the backend call fails it is restored.
        A new like earns points, an unlike silently takes them back.

        Returns:
            PointsAward when points were earned, else None
        """
        previous = self._find(post.id) or post
        was_liked = previous.liked

        self._replace(
            post.id,
            liked=not was_liked,
            likes=previous.likes - 1 if was_liked else previous.likes + 1,
        )

        try:
            await self.engagement.toggle_like(post.family_id)
        except BackendError as e:
            logger.error(f"Error toggling like: {e}")
            self._replace(post.id, liked=previous.liked, likes=previous.likes)
            return None

        if was_liked:
            await self.points.deduct_like_points()
            return None

        if await self.points.award_like_points():
            return PointsAward(points=self.points.config.like, reason="like")
        return None

    async def share(self, post: FeedPost, shared: bool = True) -> PointsAward | None:
        """Count a share once the user actually shared (not dismissed).

        Returns:
            PointsAward when points were earned, else None
        """
        if not shared:
            return None

        try:
            await self.engagement.record_share(post.family_id)
        except BackendError as e:
            logger.error(f"Error recording share: {e}")

        current = self._find(post.id) or post
        self._replace(post.id, shares=current.shares + 1)

        if await self.points.award_share_points():
            return PointsAward(points=self.points.config.share, reason="share")
        return None

    async def load_family_detail(self, family_id: str) -> FamilyDetail:
        """A family's profile and its text updates, fetched together."""
        family, posts = await asyncio.gather(
            self.families.fetch_by_id(family_id),
            self.posts_service.fetch_by_family(family_id),
        )
        return FamilyDetail(family=family, posts=posts)
