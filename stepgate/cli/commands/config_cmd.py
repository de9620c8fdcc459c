"""``stepgate config``: show the effective settings."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from stepgate.config import GateSettings

console = Console()


def config_cmd() -> None:
    """Print the settings resolved from STEPGATE_* variables and .env."""
    settings = GateSettings()

    table = Table(title="Stepgate Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    for name, value in settings.model_dump().items():
        table.add_row(name, "[dim]-[/dim]" if value is None else str(value))

    console.print(table)
