"""Initialize command - write a starter config file."""

import typer
from rich.console import Console
from rich.panel import Panel

from agape.config.loader import DEFAULT_CONFIG_PATH, save_config
from agape.config.schema import AgapeConfig

console = Console()


def init_command(force: bool = False, url: str | None = None) -> None:
    """Write the default configuration.

    The anon key is never written; it is read from the environment.

    Args:
        force: Overwrite existing config if present
        url: Optional backend project URL to store
    """
    console.print(
        Panel.fit(
            "[bold blue]agape initialization[/bold blue]\nWriting default configuration...",
            border_style="blue",
        )
    )

    if DEFAULT_CONFIG_PATH.exists() and not force:
        console.print(f"\n[yellow]Config already exists at {DEFAULT_CONFIG_PATH}[/yellow]")
        console.print("Use [bold]--force[/bold] to overwrite, or [bold]agape doctor[/bold] to check it.")
        raise typer.Exit(0)

    config = AgapeConfig()
    if url:
        config.backend.url = url.rstrip("/")

    save_config(config, DEFAULT_CONFIG_PATH)
    console.print(f"\n[green]✓ Configuration saved to {DEFAULT_CONFIG_PATH}[/green]")

    console.print("\nNext steps:")
    if not url:
        console.print(f"  [yellow]→[/yellow] Export the project URL: [bold]export {config.backend.url_env}=...[/bold]")
    console.print(f"  [yellow]→[/yellow] Export the anon key: [bold]export {config.backend.anon_key_env}=...[/bold]")
    console.print("  [yellow]→[/yellow] Check the setup: [bold]agape doctor[/bold]")
