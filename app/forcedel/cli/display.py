"""Shared Rich display functions for plans and run results.

Provides reusable table builders and summary printers used by the
``delete`` and ``plan`` commands.
"""

from rich.table import Table

from forcedel.engine.audit import DetailRow
from forcedel.models.entry import DeletionPlan, EntryKind
from forcedel.models.progress import ProgressEvent, ProgressKind
from forcedel.models.result import FailedEntry, RunResult
from forcedel.utils.formatting import console, format_size, print_info, print_success, print_warning

_KIND_LABELS: dict[EntryKind, str] = {
    EntryKind.FILE: "file",
    EntryKind.DIRECTORY: "[info]dir[/info]",
    EntryKind.SYMLINK: "[muted]link[/muted]",
}


def create_plan_table(plan: DeletionPlan, limit: int | None = None) -> Table:
    """Create a Rich table listing a plan in deletion order.

    Args:
        plan: The plan to display.
        limit: Show at most this many entries.

    Returns:
        Rich Table configured for plan display.
    """
    table = Table(
        title=f"Deletion Plan for {plan.root}",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("#", justify="right", style="muted")
    table.add_column("Kind", width=6)
    table.add_column("Path", style="entry.path", overflow="fold")

    entries = plan.entries[:limit] if limit else plan.entries
    for index, entry in enumerate(entries, start=1):
        table.add_row(str(index), _KIND_LABELS[entry.kind], entry.path)

    return table


def create_failures_table(failures: tuple[FailedEntry, ...] | list[FailedEntry]) -> Table:
    """Create a Rich table listing failed entries with their reasons.

    Args:
        failures: Failed entries to display.

    Returns:
        Rich Table configured for failure display.
    """
    table = Table(
        title="Failures",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Path", style="failed", overflow="fold")
    table.add_column("Stage", width=9)
    table.add_column("Reason", style="muted")

    for failure in failures:
        table.add_row(failure.path, failure.stage.value, failure.reason)

    return table


def create_details_table(rows: list[DetailRow]) -> Table:
    """Create the detail report table of removed entries.

    Args:
        rows: (name, path, size) tuples in removal order.

    Returns:
        Rich Table configured for the detail report.
    """
    table = Table(
        title="Deleted Entries",
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("Name", no_wrap=True)
    table.add_column("Path", style="muted", overflow="fold")
    table.add_column("Size", style="entry.size", justify="right")

    for name, path, size in rows:
        table.add_row(name, path, format_size(size))

    return table


def format_event(event: ProgressEvent) -> str:
    """Format a progress event as a styled console line."""
    style = {
        ProgressKind.DELETED: "deleted",
        ProgressKind.FORCED: "forced",
        ProgressKind.ERROR: "failed",
        ProgressKind.COMPLETE: "success",
        ProgressKind.CANCELLED: "warning",
    }[event.kind]
    # Paths may contain "[", which Rich would read as markup.
    message = event.message.replace("[", "\\[")
    return f"[{style}]{message}[/{style}]"


def print_run_summary(result: RunResult) -> None:
    """Print the one-line outcome of a run, followed by failures if any.

    Args:
        result: The finished run.
    """
    deleted = len(result.succeeded)
    size = format_size(result.bytes_freed)

    if result.failed:
        console.print(create_failures_table(result.failed))

    if result.dry_run:
        print_info(f"Dry-run: {deleted} of {result.total} entries would be deleted ({size}).")
    elif result.cancelled:
        print_warning(
            f"Cancelled: {deleted} deleted, {len(result.failed)} failed, "
            f"{result.unprocessed_count} left untouched."
        )
    elif result.failed:
        print_warning(
            f"{deleted} deleted ({result.forced_count} forced), {len(result.failed)} failed."
        )
    else:
        forced = f", {result.forced_count} forced" if result.forced_count else ""
        print_success(f"Deleted {deleted} entries ({size}{forced}).")
