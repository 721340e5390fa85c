"""Plan command for previewing deletion order.

This module provides the `forcedel plan` command, which enumerates a
subtree without touching it and shows the order entries would be
removed in.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from forcedel.cli.display import create_failures_table, create_plan_table
from forcedel.engine.engine import DeletionEngine
from forcedel.engine.errors import NotFoundError
from forcedel.models.entry import DeletionPlan
from forcedel.utils.formatting import console, print_error, print_info

EXIT_NOT_FOUND = 2


def plan(
    path: Annotated[
        Path,
        typer.Argument(help="File or directory to plan a deletion for."),
    ],
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-l", min=1, help="Show at most this many entries."),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output the plan as JSON."),
    ] = False,
) -> None:
    """Show what a delete would remove, in removal order.

    Nothing is modified. Directories that cannot be listed are shown
    as failures; their contents are not part of the plan.

    Examples:
        forcedel plan ./build              # Table of entries
        forcedel plan ./build --limit 50   # First 50 entries only
        forcedel plan ./build --json       # JSON output for scripting
    """
    try:
        deletion_plan = DeletionEngine().enumerate(path)
    except NotFoundError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_NOT_FOUND) from e

    if json_output:
        _print_json(deletion_plan)
        return

    console.print(create_plan_table(deletion_plan, limit=limit))
    if deletion_plan.enumeration_failures:
        console.print(create_failures_table(deletion_plan.enumeration_failures))

    shown = min(limit, len(deletion_plan)) if limit else len(deletion_plan)
    if shown < len(deletion_plan):
        print_info(f"Showing {shown} of {len(deletion_plan)} entries.")
    print_info(
        f"{deletion_plan.file_count} files, {deletion_plan.directory_count} directories."
    )


def _print_json(deletion_plan: DeletionPlan) -> None:
    """Print a plan as JSON."""
    data = {
        "root": deletion_plan.root,
        "entries": [
            {"path": entry.path, "kind": entry.kind.value} for entry in deletion_plan.entries
        ],
        "enumeration_failures": [f.to_dict() for f in deletion_plan.enumeration_failures],
    }
    console.print_json(json.dumps(data))
