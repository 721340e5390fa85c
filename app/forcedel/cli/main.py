"""Main CLI application entry point.

Defines the Typer application, global options and diagnostic logging.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from forcedel import __version__
from forcedel.cli.commands import config, delete, history, plan
from forcedel.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="forcedel",
    help="Delete files and directory trees, even stubborn ones.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

_log_handler: logging.Handler | None = None


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"forcedel version {__version__}")
        raise typer.Exit()


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route diagnostic logging of the forcedel package to stderr.

    Args:
        verbose: Show INFO and DEBUG messages.
        quiet: Show errors only.
    """
    global _log_handler

    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    package_logger = logging.getLogger("forcedel")
    if _log_handler is not None:
        package_logger.removeHandler(_log_handler)

    _log_handler = RichHandler(
        console=err_console,
        show_path=False,
        show_time=verbose,
        markup=False,
        rich_tracebacks=verbose,
    )
    _log_handler.setLevel(level)
    package_logger.addHandler(_log_handler)
    package_logger.setLevel(level)


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """forcedel - Delete files and directory trees, even stubborn ones.

    Removes read-only, hidden and permission-locked entries by clearing
    blocking attributes first and falling back to a forced removal
    command when a plain delete is refused.
    """
    setup_logging(verbose=verbose, quiet=quiet)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.command(name="delete")(delete.delete)
app.command(name="plan")(plan.plan)
app.add_typer(history.app, name="history")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
