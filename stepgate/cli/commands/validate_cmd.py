"""``stepgate validate``: check existing step outputs without running agents.

Each step in the requested range is validated independently, so a single
invocation reports every problem instead of stopping at the first
critical one.  Exits with code 1 when any step would halt the pipeline.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console

from stepgate.config import GateSettings
from stepgate.core.validator import OutputValidator
from stepgate.models.config import DEFAULT_OUTPUT_MAP
from stepgate.models.validation import StepRecord
from stepgate.monitor.renderer import GateRenderer

console = Console()


def load_output_map(
    map_file: Path | None = None, overrides: list[str] | None = None
) -> dict[int, str]:
    """Build a step -> path map from a JSON file and ``STEP=PATH`` overrides.

    Without a map file the standard pipeline layout is used.
    """
    if map_file is not None:
        raw = json.loads(map_file.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise typer.BadParameter(
                f"{map_file} must contain a JSON object of step -> path"
            )
        output_map = {int(step): str(path) for step, path in raw.items()}
    else:
        output_map = dict(DEFAULT_OUTPUT_MAP)

    for item in overrides or []:
        step, sep, path = item.partition("=")
        if not sep or not path or not step.strip().isdigit():
            raise typer.BadParameter(f"Expected STEP=PATH, got {item!r}")
        output_map[int(step)] = path
    return output_map


def validate_cmd(
    project_root: Path = typer.Argument(
        None, help="Directory the output paths are resolved against."
    ),
    start: int = typer.Option(0, "--start", "-s", help="First step to validate."),
    end: int = typer.Option(
        None, "--end", "-e", help="Last step to validate (defaults to the final step)."
    ),
    map_file: Path = typer.Option(
        None, "--map", help="JSON file mapping step numbers to output paths."
    ),
    output: list[str] = typer.Option(
        None, "--output", "-o", help="Override one step's output as STEP=PATH."
    ),
    allow_empty: list[int] = typer.Option(
        None, "--allow-empty", help="Step whose output may be an empty collection."
    ),
) -> None:
    """Validate existing step outputs and show a results table."""
    settings = GateSettings()
    root = project_root or settings.project_root
    last = settings.final_step if end is None else end
    if last < start:
        raise typer.BadParameter(f"--end {last} is before --start {start}")

    output_map = load_output_map(map_file, output)
    policy = settings.to_policy()
    if allow_empty:
        policy = policy.model_copy(
            update={"allow_empty_steps": policy.allow_empty_steps | frozenset(allow_empty)}
        )

    validator = OutputValidator(policy)
    records = [
        StepRecord(step=step, validation=validator.validate(step, root, output_map))
        for step in range(start, last + 1)
    ]

    GateRenderer(console=console).print_records(records, output_map)

    if any(not record.validation.can_continue for record in records):
        raise typer.Exit(code=1)
