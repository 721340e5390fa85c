"""History command for viewing past deletion runs.

This module provides the `forcedel history` command for viewing the
runs recorded in the history file.
"""

import json
from datetime import datetime
from typing import Annotated

import typer
from rich.table import Table

from forcedel.core.state import StateManager
from forcedel.models.history import HistoryEntry
from forcedel.utils.formatting import console, format_size, print_info

app = typer.Typer(
    name="history",
    help="View history of deletion runs.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def history(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            min=1,
            help="Maximum number of entries to show.",
        ),
    ] = 20,
    failed_only: Annotated[
        bool,
        typer.Option(
            "--failed",
            help="Only show runs that left entries behind or were cancelled.",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show history of deletion runs.

    Each entry shows when the run happened, its root, how many entries
    were deleted or forced, and how many were left behind.

    Examples:
        forcedel history              # Show last 20 runs
        forcedel history -n 50        # Show last 50 runs
        forcedel history --failed     # Only incomplete runs
        forcedel history --json       # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    entries = StateManager().get_history(limit=None if failed_only else limit)
    if failed_only:
        entries = [e for e in entries if not e.success][:limit]

    if not entries:
        print_info("No history entries found.")
        return

    if json_output:
        _print_json(entries)
    else:
        _print_table(entries)


def _print_table(entries: list[HistoryEntry]) -> None:
    """Print history as Rich table.

    Args:
        entries: List of history entries to display.
    """
    table = Table(title="Deletion History", header_style="bold_header", border_style="border")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Timestamp", style="info", no_wrap=True)
    table.add_column("Root", overflow="fold")
    table.add_column("Deleted", justify="right", style="deleted")
    table.add_column("Forced", justify="right", style="forced")
    table.add_column("Failed", justify="right")
    table.add_column("Freed", justify="right", style="entry.size")

    for entry in entries:
        failed = len(entry.failed_paths)
        if entry.cancelled:
            failed_text = f"[warning]{failed} (cancelled)[/]"
        elif failed:
            failed_text = f"[failed]{failed}[/]"
        else:
            failed_text = "0"

        table.add_row(
            entry.id[:8],
            _format_timestamp(entry.timestamp),
            entry.root,
            f"{entry.deleted}/{entry.total}",
            str(entry.forced),
            failed_text,
            format_size(entry.bytes_freed),
        )

    console.print(table)


def _format_timestamp(iso_timestamp: str) -> str:
    """Format ISO timestamp for display as YYYY-MM-DD HH:MM."""
    dt = datetime.fromisoformat(iso_timestamp.replace("Z", "+00:00"))
    return dt.strftime("%Y-%m-%d %H:%M")


def _print_json(entries: list[HistoryEntry]) -> None:
    """Print history as JSON."""
    output = [entry.to_dict() for entry in entries]
    console.print_json(json.dumps(output))
