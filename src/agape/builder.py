"""Wire clients and services together from configuration."""

from dataclasses import dataclass
from pathlib import Path

from agape.auth.flow import AuthFlow
from agape.auth.rate_limiter import RateLimiter
from agape.auth.store import AuthStore
from agape.backend.client import BackendClient
from agape.config.schema import AgapeConfig
from agape.feed.service import FeedService
from agape.services.engagement import EngagementService
from agape.services.families import FamiliesService
from agape.services.points import PointsService
from agape.services.posts import PostsService
from agape.storage import LocalStorage


@dataclass
class Agape:
    """Everything a client session needs, sharing one backend connection."""

    config: AgapeConfig
    client: BackendClient
    store: AuthStore
    families: FamiliesService
    posts: PostsService
    engagement: EngagementService
    points: PointsService
    feed: FeedService
    rate_limiter: RateLimiter
    auth: AuthFlow

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


def build_app(
    config: AgapeConfig,
    client: BackendClient | None = None,
    storage: LocalStorage | None = None,
) -> Agape:
    """Create the client, store and services described by ``config``.

    Args:
        config: Agape configuration
        client: Optional prebuilt backend client (tests, custom transports)
        storage: Optional local storage (defaults to ``config.storage.path``)

    Raises:
        ConfigError: If no client is given and credentials are missing
    """
    if storage is None:
        storage = LocalStorage(Path(config.storage.path))
    if client is None:
        client = BackendClient.from_config(config, storage=storage if config.session.persist else None)

    store = AuthStore(client)
    families = FamiliesService(client)
    posts = PostsService(client)
    engagement = EngagementService(client)
    points = PointsService(client, store, config.points)
    rate_limiter = RateLimiter(storage, config.rate_limit)

    return Agape(
        config=config,
        client=client,
        store=store,
        families=families,
        posts=posts,
        engagement=engagement,
        points=points,
        feed=FeedService(families, posts, engagement, points, page_size=config.feed.page_size),
        rate_limiter=rate_limiter,
        auth=AuthFlow(store, rate_limiter, reset_redirect=config.backend.password_reset_redirect),
    )
