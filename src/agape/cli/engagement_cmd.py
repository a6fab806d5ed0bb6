"""Engagement seeding and maintenance commands."""

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from agape.builder import build_app
from agape.config.loader import load_config

console = Console()


async def _async_seed(
    likes_range: tuple[int, int], shares_range: tuple[int, int], config_path: str | None
) -> None:
    config = load_config(Path(config_path)) if config_path else load_config()
    async with build_app(config) as agape:
        summary = await agape.engagement.seed(likes_range=likes_range, shares_range=shares_range)

    if summary.families == 0:
        console.print("[yellow]No families found. Add some first.[/yellow]")
        return

    console.print(f"[green]✓ Seeded {summary.total} engagement records[/green]")
    console.print(f"  Families: {summary.families}")
    console.print(f"  Likes: {summary.likes}")
    console.print(f"  Shares: {summary.shares}")


def seed_engagement(
    likes_range: tuple[int, int] = (50, 500),
    shares_range: tuple[int, int] = (10, 100),
    config_path: str | None = None,
) -> None:
    """Insert random likes and shares for every family."""
    for name, (low, high) in (("likes", likes_range), ("shares", shares_range)):
        if low < 0 or low > high:
            console.print(f"[red]Invalid {name} range: {low}-{high}[/red]")
            raise typer.Exit(1)

    asyncio.run(_async_seed(likes_range, shares_range, config_path))


async def _async_refresh(config_path: str | None) -> bool:
    config = load_config(Path(config_path)) if config_path else load_config()
    async with build_app(config) as agape:
        return await agape.engagement.refresh_counts()


def refresh_counts(config_path: str | None = None) -> None:
    """Refresh the engagement counts view."""
    if asyncio.run(_async_refresh(config_path)):
        console.print("[green]✓ Engagement counts refreshed[/green]")
    else:
        console.print("[red]✗ Failed to refresh engagement counts[/red]")
        raise typer.Exit(1)
