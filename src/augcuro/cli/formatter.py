# src/augcuro/cli/formatter.py
import json
from typing import Any, Dict, List

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from augcuro.core.models import Classification, Outcome, OutcomeKind

# Initialize the Rich console for high-quality terminal output
console = Console()

OUTCOME_STYLE = {
    OutcomeKind.SUCCESS: ("green", "✅"),
    OutcomeKind.REPAIRED: ("cyan", "🔧"),
    OutcomeKind.FAILURE: ("red", "❌"),
}


class AugFormatter:
    """
    AugFormatter: renders outcomes, raw augtool diagnostics and batch reports.
    """

    def show_command(self, command: str):
        console.print(Panel(
            Syntax(command.rstrip(), "bash", theme="monokai", background_color="default"),
            title="augtool command", border_style="dim"
        ))

    def show_diagnostic(self, raw_output: str):
        """Raw tool output, shown whatever the outcome."""
        # augtool output routinely contains [..] predicates; never parse it as markup
        body = escape(raw_output.rstrip()) or "[dim](empty output)[/dim]"
        console.print(Panel(body, title="augtool output", border_style="dim"))

    def show_outcome(self, outcome: Outcome):
        color, icon = OUTCOME_STYLE[outcome.kind]
        lines = [
            f"{icon} [bold {color}]{outcome.kind.value.upper()}[/bold {color}]",
            f"[white]{escape(outcome.message)}[/white]",
            f"[dim]class: {outcome.class_identity}_{outcome.kind.value}[/dim]",
            f"[dim]legacy: {outcome.legacy_identity}_{outcome.kind.value}[/dim]",
        ]
        if outcome.backup.attempted:
            state = "[green]saved[/green]" if outcome.backup.succeeded else "[red]failed[/red]"
            lines.append(f"Backup: {escape(outcome.backup.artifact_path or '-')} ({state})")
        console.print(Panel("\n".join(lines), border_style=color, expand=False))

    def show_classification(self, facts: Classification, fired: List[str]):
        table = Table(title="Classification", show_header=True, header_style="bold magenta")
        table.add_column("Fact")
        table.add_column("Value", justify="center")
        for name in ("kept", "repaired", "error"):
            value = getattr(facts, name)
            table.add_row(name, "[green]true[/green]" if value else "[dim]false[/dim]")
        console.print(table)
        console.print(f"[dim]Rules fired: {', '.join(fired) or 'none'}[/dim]")

    def print_final_table(self, outcomes: List[Outcome]):
        """
        Builds the summary table shown at the end of a batch run.
        """
        table = Table(title="AugCuro Execution Report", show_lines=True, header_style="bold magenta")
        table.add_column("Path", style="cyan")
        table.add_column("File", style="white")
        table.add_column("Outcome", style="bold")
        table.add_column("Result", justify="center")

        for o in outcomes:
            color, icon = OUTCOME_STYLE[o.kind]
            request = o.context.request if o.context else None
            table.add_row(
                escape(request.path) if request else o.legacy_identity,
                escape(request.file or "-") if request else "-",
                f"[{color}]{o.kind.value.upper()}[/{color}]",
                icon
            )

        console.print(table)

    def print_summary(self, summary: Dict[str, Any]):
        console.print(Panel(
            f"[bold white]Summary Report[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Total Actions:   {summary['total_actions']}\n"
            f"Kept:           [green]{summary['successful']}[/green]\n"
            f"Repaired:       [cyan]{summary['repaired']}[/cyan]\n"
            f"Failed:         [red]{summary['failed']}[/red]\n"
            f"Backups Created: {summary['backups_created']}",
            border_style="dim"
        ))

    def print_json(self, payload: Any):
        console.print_json(json.dumps(payload))
