"""Feed inspection command."""

import asyncio
from pathlib import Path

from rich.console import Console
from rich.table import Table

from agape.builder import build_app
from agape.config.loader import load_config
from agape.models import FeedPost

console = Console()

_TYPE_STYLE = {"photo": "cyan", "video": "magenta", "text": "green"}


def _feed_table(posts: list[FeedPost]) -> Table:
    table = Table(title=f"Home Feed ({len(posts)} posts)", show_header=True, header_style="bold cyan")
    table.add_column("Created", style="dim")
    table.add_column("Type")
    table.add_column("Family", style="white")
    table.add_column("Text")
    table.add_column("♥", justify="right")
    table.add_column("↗", justify="right")

    for post in posts:
        text = post.content if post.type == "text" else post.caption
        style = _TYPE_STYLE[post.type]
        table.add_row(
            post.created_at[:10],
            f"[{style}]{post.type}[/{style}]",
            post.family_name,
            (text or "")[:60],
            str(post.likes),
            str(post.shares),
        )
    return table


async def _async_show(pages: int, config_path: str | None) -> None:
    config = load_config(Path(config_path)) if config_path else load_config()
    async with build_app(config) as agape:
        feed = agape.feed
        await feed.refresh()
        for _ in range(pages - 1):
            if not feed.has_more:
                break
            await feed.load_more()

    if feed.error:
        console.print(f"[red]{feed.error}[/red]")
    if not feed.posts:
        console.print("[yellow]The feed is empty[/yellow]")
        return

    console.print(_feed_table(feed.posts))
    if feed.has_more:
        console.print("[dim]More posts available (use --pages)[/dim]")


def show_feed(pages: int = 1, config_path: str | None = None) -> None:
    """Load and print the first ``pages`` pages of the feed."""
    asyncio.run(_async_show(pages, config_path))
