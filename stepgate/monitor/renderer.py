"""Rich terminal renderer for gate results.

Turns a sequence of ``StepRecord`` into a Rich panel with one row per
gated step and a summary footer.

Color scheme
------------
- green     : OK
- yellow    : WARNING
- bold red  : CRITICAL
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from stepgate.models.severity import Severity
from stepgate.models.validation import StepRecord

_SEVERITY_STYLES: dict[Severity, str] = {
    Severity.OK: "green",
    Severity.WARNING: "yellow",
    Severity.CRITICAL: "bold red",
}

_SEVERITY_LABELS: dict[Severity, str] = {
    Severity.OK: "[green]OK[/green]",
    Severity.WARNING: "[yellow]WARNING[/yellow]",
    Severity.CRITICAL: "[bold red]CRITICAL[/bold red]",
}


class GateRenderer:
    """Renders gate step records as Rich terminal output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_records(
        self,
        records: Sequence[StepRecord],
        output_map: Mapping[int, str] | None = None,
        *,
        title: str = "Stepgate Results",
    ) -> Panel:
        """Render *records* as a Panel containing a table and a summary."""
        table = self._build_table(records, output_map or {})

        counts = {severity: 0 for severity in Severity}
        for record in records:
            counts[record.validation.severity] += 1

        summary_parts: list[str] = [
            f"[bold]Steps:[/bold] {len(records)}",
            f"[green][bold]OK:[/bold] {counts[Severity.OK]}[/green]",
            f"[yellow][bold]Warnings:[/bold] {counts[Severity.WARNING]}[/yellow]",
            f"[red][bold]Critical:[/bold] {counts[Severity.CRITICAL]}[/red]",
        ]
        if counts[Severity.CRITICAL]:
            summary_parts.append("[bold red]Pipeline would HALT[/bold red]")
        else:
            summary_parts.append("[green]Pipeline may continue[/green]")

        summary = "  |  ".join(summary_parts)
        return Panel(
            Group(table, Text(""), Text.from_markup(summary)),
            title=f"[bold]{title}[/bold]",
            border_style="blue",
            padding=(1, 2),
        )

    def _build_table(
        self, records: Sequence[StepRecord], output_map: Mapping[int, str]
    ) -> Table:
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("Step", style="dim", width=6, justify="right")
        table.add_column("Output", min_width=25)
        table.add_column("Severity", min_width=10, justify="center")
        table.add_column("Issues", min_width=30)
        table.add_column("Duration", justify="right", width=10)

        for record in records:
            result = record.validation
            style = _SEVERITY_STYLES[result.severity]
            output = output_map.get(record.step, "-")
            issues = (
                "\n".join(escape(issue) for issue in result.issues)
                if result.issues
                else "[dim]-[/dim]"
            )
            table.add_row(
                str(record.step),
                f"[{style}]{escape(output)}[/{style}]",
                _SEVERITY_LABELS[result.severity],
                issues,
                f"{record.duration_ms}ms",
            )
        return table

    def print_records(
        self,
        records: Sequence[StepRecord],
        output_map: Mapping[int, str] | None = None,
    ) -> None:
        """Print the rendered records to the console."""
        self.console.print(self.render_records(records, output_map))
