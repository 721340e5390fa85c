"""Delete command for removing files and directory trees.

This module provides the `forcedel delete` command, which runs the
deletion engine on a worker thread and renders its progress events.
"""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn

from forcedel.cli.display import create_details_table, format_event, print_run_summary
from forcedel.core.config import ConfigError, load_config
from forcedel.core.paths import get_audit_log_path
from forcedel.core.state import StateManager
from forcedel.engine import audit
from forcedel.engine.engine import DeletionEngine, RunHandle
from forcedel.engine.errors import BusyError, NotFoundError
from forcedel.engine.remover import NullForcedRemover
from forcedel.models.progress import ProgressKind
from forcedel.models.result import RunResult
from forcedel.utils.formatting import console, err_console, print_error, print_info, print_warning

logger = logging.getLogger(__name__)

EXIT_FAILURES = 1
EXIT_NOT_FOUND = 2
EXIT_CANCELLED = 130


def delete(
    ctx: typer.Context,
    path: Annotated[
        Path,
        typer.Argument(help="File or directory to delete."),
    ],
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-n", help="Show what would be deleted without deleting."),
    ] = False,
    no_force: Annotated[
        bool,
        typer.Option("--no-force", help="Never fall back to the forced removal command."),
    ] = False,
    details: Annotated[
        bool,
        typer.Option("--details", "-d", help="List every deleted entry with its size."),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output the run result as JSON."),
    ] = False,
) -> None:
    """Delete a file or directory tree.

    Children are removed before their parents. Entries that refuse a
    plain delete have their read-only, hidden and system attributes
    cleared and are retried once through the forced removal command.
    Failures are reported at the end; they do not stop the run.

    Press Ctrl+C to cancel; the entry in progress is finished first.

    Examples:
        forcedel delete ./build              # Confirm, then delete
        forcedel delete ./build --yes        # No confirmation
        forcedel delete ./build --dry-run    # Only list what would go
        forcedel delete ./build --details    # Show a per-entry report
    """
    obj = ctx.obj or {}
    verbose = bool(obj.get("verbose", False))
    quiet = bool(obj.get("quiet", False))

    try:
        config = load_config()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if not path.exists() and not path.is_symlink():
        print_error(f"Path does not exist: {path}")
        raise typer.Exit(code=EXIT_NOT_FOUND)

    if not dry_run and not yes:
        confirmed = typer.confirm(
            f"Permanently delete '{path}' and everything below it?",
            default=False,
        )
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    engine = DeletionEngine(
        config=config,
        dry_run=dry_run,
        forced_remover=NullForcedRemover() if no_force else None,
    )

    audit_handler = None
    if config.audit_log and not dry_run:
        try:
            audit_handler = audit.attach_audit_file(get_audit_log_path())
        except OSError as e:
            print_warning(f"Audit log unavailable: {e}")

    try:
        result = _execute(engine, path, show_events=not json_output and not quiet, verbose=verbose)
    except NotFoundError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_NOT_FOUND) from e
    except BusyError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    finally:
        if audit_handler is not None:
            audit.detach_audit_handler(audit_handler)

    if config.record_history and not dry_run:
        _record_history(result)

    if json_output:
        console.print_json(json.dumps(result.to_dict()))
    else:
        if details and result.succeeded:
            console.print(create_details_table(audit.detail_rows(result)))
        if not quiet or not result.success:
            print_run_summary(result)

    if result.cancelled:
        raise typer.Exit(code=EXIT_CANCELLED)
    if result.failed:
        raise typer.Exit(code=EXIT_FAILURES)


def _execute(engine: DeletionEngine, path: Path, show_events: bool, verbose: bool) -> RunResult:
    """Run the engine on a worker thread while rendering its events.

    Args:
        engine: Engine to run.
        path: Root to delete.
        show_events: Render the progress bar and event lines.
        verbose: Print every event line, not only forced and failed ones.

    Returns:
        The finished RunResult.

    Raises:
        NotFoundError: If the root disappeared before the run started.
        BusyError: If the engine is already running.
    """
    handle = engine.start(path)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        console=err_console,
        disable=not show_events,
        transient=True,
    ) as progress:
        task = progress.add_task("Deleting...", total=100)
        try:
            _drain(handle, progress, task, verbose)
        except KeyboardInterrupt:
            handle.cancel()
            print_warning("Cancelling after the current entry...")
            _drain(handle, progress, task, verbose)

    return handle.wait()


def _drain(handle: RunHandle, progress: Progress, task: TaskID, verbose: bool) -> None:
    """Consume events from a run until it terminates."""
    for event in handle.events():
        progress.update(task, completed=event.percent)
        if event.is_terminal:
            continue
        if verbose or event.kind in (ProgressKind.FORCED, ProgressKind.ERROR):
            progress.console.print(format_event(event))


def _record_history(result: RunResult) -> None:
    """Append the run to history, warning instead of failing."""
    try:
        entry = StateManager().record_run(result, metadata={"command": "forcedel delete"})
        logger.debug("Recorded history entry %s", entry.id)
    except (OSError, RuntimeError) as e:
        print_warning(f"Failed to record history: {e}")
