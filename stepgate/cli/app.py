"""Main Typer application: imports and registers all CLI commands.

Entry point: ``stepgate`` (configured via pyproject.toml [project.scripts]).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from stepgate.cli.commands.config_cmd import config_cmd
from stepgate.cli.commands.validate_cmd import validate_cmd
from stepgate.config import GateSettings

app = typer.Typer(
    name="stepgate",
    help="Stepgate: validate pipeline step outputs and gate continue vs. halt.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="validate", help="Validate existing step outputs.")(validate_cmd)
app.command(name="config", help="Show the effective settings.")(config_cmd)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None, "--log-level", help="Logging level (defaults to STEPGATE_LOG_LEVEL)."
    ),
) -> None:
    """Configure logging before any command runs."""
    level = (log_level or GateSettings().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
