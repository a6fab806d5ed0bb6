"""Main CLI application using Typer."""

import logging
import sys

import typer
from rich.console import Console
from rich.logging import RichHandler

from agape import __version__

app = typer.Typer(
    name="agape",
    help="Agape - operator tooling for the crisis family fundraising backend",
    no_args_is_help=True,
)

console = Console()

ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to config file (default: ~/.agape/agape.yaml)",
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Agape command line."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@app.command()
def version():
    """Show agape version."""
    console.print(f"agape version {__version__}")


@app.command()
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config"),
    url: str = typer.Option(None, "--url", help="Backend project URL"),
):
    """Write a default configuration file."""
    from agape.cli.init_cmd import init_command

    init_command(force=force, url=url)


@app.command()
def doctor(config_path: str = ConfigOption):
    """Check configuration, credentials and backend reachability."""
    from agape.cli.doctor import doctor_command

    doctor_command(config_path=config_path)


# Family commands
family_app = typer.Typer(help="Manage crisis families")
app.add_typer(family_app, name="family")


@family_app.command("add")
def family_add(
    file: str = typer.Argument(..., help="JSON file describing the family"),
    config_path: str = ConfigOption,
):
    """Add a family from a JSON file."""
    from agape.cli.family_cmd import add_family

    add_family(file, config_path=config_path)


@family_app.command("example")
def family_example(
    output: str = typer.Option(
        "example-family.json", "--output", "-o", help="Where to write the example"
    ),
):
    """Write an example family JSON file."""
    from agape.cli.family_cmd import write_example

    write_example(output)


@family_app.command("list")
def family_list(
    verified: bool = typer.Option(False, "--verified", help="Only verified families"),
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum number of families to show"),
    config_path: str = ConfigOption,
):
    """List families, newest first."""
    from agape.cli.family_cmd import list_families

    list_families(verified=verified, limit=limit, config_path=config_path)


@family_app.command("search")
def family_search(
    term: str = typer.Argument(..., help="Text to look for in name, location or tags"),
    config_path: str = ConfigOption,
):
    """Search families by name, location or tag."""
    from agape.cli.family_cmd import search_families

    search_families(term, config_path=config_path)


# Post commands
posts_app = typer.Typer(help="Manage family text posts")
app.add_typer(posts_app, name="posts")


@posts_app.command("import")
def posts_import(
    file: str = typer.Argument(..., help="JSON file with posts grouped by family"),
    config_path: str = ConfigOption,
):
    """Import text posts for several families."""
    from agape.cli.posts_cmd import import_posts

    import_posts(file, config_path=config_path)


# Engagement commands
engagement_app = typer.Typer(help="Likes and shares")
app.add_typer(engagement_app, name="engagement")


@engagement_app.command("seed")
def engagement_seed(
    min_likes: int = typer.Option(50, "--min-likes", help="Fewest likes per family"),
    max_likes: int = typer.Option(500, "--max-likes", help="Most likes per family"),
    min_shares: int = typer.Option(10, "--min-shares", help="Fewest shares per family"),
    max_shares: int = typer.Option(100, "--max-shares", help="Most shares per family"),
    config_path: str = ConfigOption,
):
    """Fill every family with random demo likes and shares."""
    from agape.cli.engagement_cmd import seed_engagement

    seed_engagement(
        likes_range=(min_likes, max_likes),
        shares_range=(min_shares, max_shares),
        config_path=config_path,
    )


@engagement_app.command("refresh")
def engagement_refresh(config_path: str = ConfigOption):
    """Refresh the engagement counts view."""
    from agape.cli.engagement_cmd import refresh_counts

    refresh_counts(config_path=config_path)


# Feed commands
feed_app = typer.Typer(help="Inspect the home feed")
app.add_typer(feed_app, name="feed")


@feed_app.command("show")
def feed_show(
    pages: int = typer.Option(1, "--pages", "-p", help="Number of pages to load", min=1),
    config_path: str = ConfigOption,
):
    """Show the home feed as a signed-out visitor sees it."""
    from agape.cli.feed_cmd import show_feed

    show_feed(pages=pages, config_path=config_path)


# Password commands
password_app = typer.Typer(help="Password strength tools")
app.add_typer(password_app, name="password")


@password_app.command("check")
def password_check(
    password: str = typer.Argument(..., help="Password to score"),
):
    """Score a password and list unmet requirements."""
    from agape.cli.password_cmd import check_password

    check_password(password)


def main():
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
