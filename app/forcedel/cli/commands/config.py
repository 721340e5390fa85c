"""Config command for inspecting and creating the configuration file.

This module provides the `forcedel config` command group.
"""

import json
from typing import Annotated

import typer

from forcedel.core.config import ConfigError, EngineConfig, load_config, save_config
from forcedel.core.paths import get_config_path
from forcedel.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    name="config",
    help="Inspect and create the configuration file.",
    no_args_is_help=True,
)


@app.command("show")
def show(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON."),
    ] = False,
) -> None:
    """Show the effective configuration.

    Values not set in the config file are shown with their defaults.
    """
    try:
        config = load_config()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if json_output:
        console.print_json(json.dumps(config.model_dump()))
        return

    config_path = get_config_path()
    source = str(config_path) if config_path.exists() else f"{config_path} (not created, defaults)"
    console.print(f"[muted]Source:[/] {source}")
    for name, value in config.model_dump().items():
        shown = "host default" if value is None else value
        console.print(f"  [header]{name}[/] = {shown}")


@app.command("path")
def path() -> None:
    """Print the configuration file path."""
    typer.echo(str(get_config_path()))


@app.command("init")
def init(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with the default settings."""
    config_path = get_config_path()
    if config_path.exists() and not force:
        print_info(f"Config already exists: {config_path} (use --force to overwrite)")
        raise typer.Exit(code=1)

    try:
        saved = save_config(EngineConfig(), config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Wrote default config to {saved}")
