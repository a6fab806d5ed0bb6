"""Password strength command."""

import typer
from rich.console import Console
from rich.table import Table

from agape.auth.password import (
    check_password_requirements,
    get_password_strength_percentage,
    validate_password,
)

console = Console()

_REQUIREMENT_LABELS = {
    "min_length": "At least 8 characters",
    "has_uppercase": "One uppercase letter",
    "has_lowercase": "One lowercase letter",
    "has_number": "One number",
    "has_special_char": "One special character",
    "not_common": "Not a common password",
}


def check_password(password: str) -> None:
    """Print the strength and requirement checklist; exit 1 if not acceptable."""
    strength = validate_password(password)
    requirements = check_password_requirements(password)

    percentage = get_password_strength_percentage(strength.score)
    console.print(
        f"Strength: [bold {strength.color}]{strength.label}[/bold {strength.color}] "
        f"({strength.score:g}/4, {percentage:.0f}%)"
    )

    table = Table(show_header=False)
    table.add_column("Met", width=3)
    table.add_column("Requirement")
    for name, label in _REQUIREMENT_LABELS.items():
        met = getattr(requirements, name)
        table.add_row("[green]✓[/green]" if met else "[red]✗[/red]", label)
    console.print(table)

    for tip in strength.feedback:
        console.print(f"  [yellow]→[/yellow] {tip}")

    if not strength.is_valid:
        raise typer.Exit(1)
