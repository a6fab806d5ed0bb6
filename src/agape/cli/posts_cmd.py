"""Text post import command."""

import asyncio
import json
from pathlib import Path

import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console

from agape.builder import build_app
from agape.config.loader import load_config
from agape.services.posts import FamilyPostsInput

console = Console()

_batches = TypeAdapter(list[FamilyPostsInput])


def _read_posts_file(file: str) -> list[FamilyPostsInput]:
    path = Path(file)
    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(1)

    try:
        return _batches.validate_json(path.read_text())
    except ValidationError as e:
        console.print(f"[red]Invalid posts file {path}:[/red] {e}")
        raise typer.Exit(1) from e


async def _async_import(batches: list[FamilyPostsInput], config_path: str | None) -> None:
    config = load_config(Path(config_path)) if config_path else load_config()
    async with build_app(config) as agape:
        summary = await agape.posts.import_posts(batches)

    if summary.missing_families:
        console.print(
            f"[yellow]⚠ {len(summary.missing_families)} families not found: "
            f"{', '.join(summary.missing_families)}[/yellow]"
        )

    console.print("\n[bold cyan]Import complete[/bold cyan]")
    console.print(f"  Imported: {summary.imported}")
    console.print(f"  Failed: {summary.failed}")
    console.print(f"  Families: {summary.families}")
    console.print(f"  Average per family: {summary.average_per_family:.1f}")


def import_posts(file: str, config_path: str | None = None) -> None:
    """Import posts from a JSON list of ``{familyId, familyName, posts}``."""
    batches = _read_posts_file(file)
    total = sum(len(batch.posts) for batch in batches)
    console.print(f"Importing {total} posts for {len(batches)} families...")
    asyncio.run(_async_import(batches, config_path))
