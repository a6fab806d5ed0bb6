"""Doctor command - configuration and backend health check."""

import asyncio
import sys
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from agape.backend.client import BackendClient
from agape.backend.errors import BackendError
from agape.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config, resolve_credentials
from agape.services.families import FamiliesService

console = Console()


def doctor_command(config_path: str | None = None):
    """Run health checks."""
    console.print(
        Panel.fit(
            "[bold blue]agape health check[/bold blue]\nChecking your configuration...",
            border_style="blue",
        )
    )

    issues = asyncio.run(_async_doctor(config_path))
    if issues:
        sys.exit(1)


async def _async_doctor(config_path: str | None = None) -> list[str]:
    """Async doctor logic. Returns the critical issues found."""
    issues = []
    warnings = []

    table = Table(title="Health Check", show_header=True, header_style="bold cyan")
    table.add_column("Check", style="white", width=24)
    table.add_column("Status", width=8)
    table.add_column("Details", style="dim")

    # 1. Python version
    py_version = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    if sys.version_info >= (3, 11):
        table.add_row("Python Version", "[green]✓[/green]", py_version)
    else:
        table.add_row("Python Version", "[red]✗[/red]", f"{py_version} (need 3.11+)")
        issues.append("Python version too old. Upgrade to Python 3.11 or higher.")

    # 2. Config file
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    config = None
    try:
        config = load_config(path)
    except ConfigError as e:
        table.add_row("Configuration", "[red]✗[/red]", f"Invalid: {e}")
        issues.append(f"Config file is invalid: {e}")
    else:
        if path.exists():
            table.add_row("Configuration", "[green]✓[/green]", str(path))
        else:
            table.add_row("Configuration", "[yellow]⚠[/yellow]", "Not found (using defaults)")
            warnings.append(f"No config file at {path}. Run 'agape init' to create one.")

    # 3. Credentials
    credentials = None
    if config is not None:
        try:
            credentials = resolve_credentials(config)
        except ConfigError as e:
            table.add_row("Credentials", "[red]✗[/red]", "Missing")
            issues.append(str(e))
        else:
            table.add_row("Credentials", "[green]✓[/green]", credentials[0])

    # 4. Backend reachability
    if credentials is not None:
        url, anon_key = credentials
        async with BackendClient(url, anon_key, timeout=config.backend.timeout) as client:
            if await client.health_check():
                table.add_row("Auth API", "[green]✓[/green]", "Healthy")
            else:
                table.add_row("Auth API", "[red]✗[/red]", "Unreachable")
                issues.append(f"Auth API at {url} did not answer the health check.")

            try:
                total = await FamiliesService(client).count()
                table.add_row("Families Table", "[green]✓[/green]", f"{total} families")
            except BackendError as e:
                table.add_row("Families Table", "[red]✗[/red]", e.message)
                issues.append(f"Cannot read crisis_families: {e.message}")

    console.print("\n")
    console.print(table)
    console.print("\n")

    if not issues and not warnings:
        console.print(
            Panel.fit(
                "[bold green]✓ All checks passed![/bold green]\nThe backend is reachable.",
                border_style="green",
            )
        )
        return issues

    if issues:
        console.print("[bold red]Issues Found:[/bold red]")
        for i, issue in enumerate(issues, 1):
            console.print(f"  {i}. {issue}")
        console.print()

    if warnings:
        console.print("[bold yellow]Warnings:[/bold yellow]")
        for i, warning in enumerate(warnings, 1):
            console.print(f"  {i}. {warning}")
        console.print()

    if not issues:
        console.print("[green]No critical issues. Warnings are optional improvements.[/green]")

    return issues
