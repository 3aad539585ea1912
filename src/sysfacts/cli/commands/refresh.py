"""Refresh command for sysfacts CLI.

This module provides the `facts refresh` command that collects facts and then
re-runs the plugins providing one subtree.
"""

from pathlib import Path
from typing import Annotated

import typer

from sysfacts.cli.session import EXIT_GRAPH_ERROR, open_system
from sysfacts.plugins.errors import DependencyCycleError, NoAttributeError


def refresh_command(
    path: Annotated[
        str,
        typer.Argument(help="Fact path whose providers are re-run ('/' for all)"),
    ] = "/",
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to settings.yml",
        ),
    ] = None,
    plugin_path: Annotated[
        list[Path] | None,
        typer.Option(
            "--plugin-path",
            "-d",
            help="Additional plugin directory (repeatable)",
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            "-l",
            help="Log level (debug, info, warning, error, critical)",
        ),
    ] = None,
) -> None:
    """Collect facts, then refresh the subtree at PATH and print it."""
    system = open_system(config, plugin_path, log_level)

    try:
        system.run_plugins(safe=system.settings.safe)
    except (DependencyCycleError, NoAttributeError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(EXIT_GRAPH_ERROR) from e

    system.refresh_plugins(path)

    if path.strip("/"):
        try:
            typer.echo(system.attributes_print(path))
        except ValueError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(EXIT_GRAPH_ERROR) from e
    else:
        typer.echo(system.json_pretty_print())
