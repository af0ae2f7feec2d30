"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys

from rich.console import Console
from rich.table import Table

from picoprep.core.theme import get_theme
from picoprep.models.step import ProvisionReport, StepStatus

_STATUS_LABELS = {
    StepStatus.OK: "[success]OK[/success]",
    StepStatus.WARNING: "[warning]WARN[/warning]",
    StepStatus.FAILED: "[error]FAIL[/error]",
}


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def print_banner(title: str) -> None:
    """Print a stage banner, preceded by a blank line."""
    console.print()
    console.print(f"[banner]==== {title} ====[/]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")


def create_stage_table(report: ProvisionReport) -> Table:
    """Create a table listing every stage that ran and how it ended.

    Args:
        report: Report produced by the provisioner.

    Returns:
        Rich Table with one row per executed stage.
    """
    table = Table(
        title="Provisioning Stages",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=8, justify="center")
    table.add_column("Stage", no_wrap=True)
    table.add_column("Details")

    for result in report.results:
        status = result.status
        if status is StepStatus.FAILED:
            details = result.error or "Unknown error"
        elif status is StepStatus.WARNING:
            details = f"{len(result.warnings)} warning(s)"
        else:
            details = result.message or ""

        table.add_row(_STATUS_LABELS[status], result.title, f"[muted]{details}[/muted]")

    return table


def create_summary_table(rows: list[tuple[str, str]], title: str = "Environment") -> Table:
    """Create a two-column label/value table.

    Args:
        rows: (label, value) pairs in display order.
        title: Table title.

    Returns:
        Rich Table configured for the summary report.
    """
    table = Table(
        title=title,
        show_header=False,
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("Item", style="bold_header", no_wrap=True)
    table.add_column("Value", style="text")
    for label, value in rows:
        table.add_row(label, value)
    return table
