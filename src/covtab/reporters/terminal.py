"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from covtab.models.coverage import Severity

if TYPE_CHECKING:
    from collections.abc import Iterable

    from covtab.models.coverage import CoverageRow, CoverageTable

console = Console()
err_console = Console(stderr=True)

# (path style, percentage style) per tier
_SEVERITY_STYLES: dict[Severity, tuple[str, str]] = {
    Severity.UNCOVERED: ("bright_red", "bright_red"),
    Severity.VERY_LOW: ("", "bright_red"),
    Severity.LOW: ("", "red"),
    Severity.MEDIUM: ("", "yellow"),
    Severity.GOOD: ("", "green"),
    Severity.EXCELLENT: ("", "bright_green"),
}


def severity_style(severity: Severity) -> tuple[str, str]:
    """Return the (path, percentage) Rich styles for a severity tier."""
    return _SEVERITY_STYLES[severity]


def format_percentage(percentage: float) -> str:
    return f"{percentage:.2f}"


class CLIReporter:
    """Rich terminal output for coverage tables and diagnostics."""

    def __init__(self) -> None:
        """Initialize the CLI reporter."""
        self.console = console
        self.err_console = err_console

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message to stderr."""
        self.err_console.print(f"[red]✗[/red] {escape(message)}", highlight=False, soft_wrap=True)

    def print_diagnostic_paths(self, title: str, paths: Iterable[str]) -> None:
        """Print a list of paths to stderr to help diagnose a failed run."""
        self.err_console.print(f"[dim]{title}[/dim]", highlight=False)
        for path in paths:
            self.err_console.print(f"  {path}", highlight=False, markup=False, soft_wrap=True)

    def build_coverage_table(self, table: CoverageTable) -> Table:
        """Build the two-column Rich table for *table* with a total footer."""
        total_path_style, total_pct_style = severity_style(table.severity)
        rich_table = Table(show_footer=True, header_style="bold")
        rich_table.add_column(
            "File",
            justify="left",
            footer=Text("Total", style=f"bold {total_path_style}".strip()),
        )
        rich_table.add_column(
            "Coverage",
            justify="right",
            footer=Text(format_percentage(table.aggregate), style=f"bold {total_pct_style}"),
        )

        for row in table.rows:
            path_style, pct_style = severity_style(row.severity)
            rich_table.add_row(
                Text(row.path, style=path_style),
                Text(format_percentage(row.percentage), style=pct_style),
            )

        return rich_table

    def print_coverage_table(self, table: CoverageTable, *, show_excluded: bool = False) -> None:
        """Print the coverage table, optionally followed by excluded files."""
        self.console.print(self.build_coverage_table(table))
        if show_excluded and table.excluded:
            self.print_excluded(table.excluded)

    def print_excluded(self, rows: Iterable[CoverageRow]) -> None:
        """Print files left out of the total."""
        self.console.print("\n[dim]Excluded from total:[/dim]")
        for row in rows:
            self.console.print(
                f"  [dim]{escape(row.path)}[/dim] {format_percentage(row.percentage)}",
                highlight=False,
            )

    def print_file_list(self, paths: Iterable[str]) -> None:
        """Print one path per line without markup."""
        for path in paths:
            self.console.print(path, markup=False, highlight=False, soft_wrap=True)


# Singleton instance for easy import
reporter = CLIReporter()
