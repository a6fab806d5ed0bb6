"""Family management commands."""

import asyncio
import json
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from agape.builder import build_app
from agape.config.loader import load_config
from agape.models import CrisisFamily, FamilyInput
from agape.services.families import EXAMPLE_FAMILY, validate_family_data

console = Console()


def _families_table(families: list[CrisisFamily], title: str) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="white")
    table.add_column("Location")
    table.add_column("Raised", justify="right")
    table.add_column("Verified", justify="center")

    for family in families:
        table.add_row(
            family.id,
            family.name,
            family.location,
            f"${family.fundraising_current:,.0f} / ${family.fundraising_goal:,.0f} "
            f"({family.fundraising_progress:.0%})",
            "[green]✓[/green]" if family.verified else "",
        )
    return table


def _read_family_file(file: str) -> FamilyInput:
    path = Path(file)
    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(1)

    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON in {path}: {e}[/red]")
        raise typer.Exit(1) from e

    problems = validate_family_data(data)
    if problems:
        console.print("[red]Validation failed:[/red]")
        for problem in problems:
            console.print(f"  - {problem}")
        raise typer.Exit(1)

    try:
        return FamilyInput.model_validate(data)
    except ValidationError as e:
        console.print(f"[red]Validation failed:[/red] {e}")
        raise typer.Exit(1) from e


async def _async_add(family: FamilyInput, config_path: str | None) -> None:
    config = load_config(Path(config_path)) if config_path else load_config()
    async with build_app(config) as agape:
        created = await agape.families.add(family)

    console.print(f"[green]✓ Added {created.name}[/green]")
    console.print(f"  ID: {created.id}")
    console.print(f"  Location: {created.location}")
    console.print(f"  Goal: ${created.fundraising_goal:,.0f}")


def add_family(file: str, config_path: str | None = None) -> None:
    """Validate a family JSON file and insert it."""
    family = _read_family_file(file)
    asyncio.run(_async_add(family, config_path))


def write_example(output: str) -> None:
    """Write the example family to ``output``."""
    path = Path(output)
    path.write_text(json.dumps(EXAMPLE_FAMILY, indent=2, ensure_ascii=False) + "\n")
    console.print(f"[green]✓ Example written to {path}[/green]")
    console.print(f"Edit it, then run: [bold]agape family add {path}[/bold]")


async def _async_list(verified: bool, limit: int, config_path: str | None) -> None:
    config = load_config(Path(config_path)) if config_path else load_config()
    async with build_app(config) as agape:
        families = await agape.families.fetch_all(limit=limit, verified=True if verified else None)
        total = await agape.families.count(verified=True if verified else None)

    if not families:
        console.print("[yellow]No families found[/yellow]")
        return

    console.print(_families_table(families, f"Families ({len(families)} of {total})"))


def list_families(verified: bool = False, limit: int = 20, config_path: str | None = None) -> None:
    """Show the newest families."""
    asyncio.run(_async_list(verified, limit, config_path))


async def _async_search(term: str, config_path: str | None) -> None:
    config = load_config(Path(config_path)) if config_path else load_config()
    async with build_app(config) as agape:
        families = await agape.families.search(term)

    if not families:
        console.print(f"[yellow]No families match '{term}'[/yellow]")
        return

    console.print(_families_table(families, f"Families matching '{term}'"))


def search_families(term: str, config_path: str | None = None) -> None:
    """Search by name, location or tag."""
    asyncio.run(_async_search(term, config_path))
