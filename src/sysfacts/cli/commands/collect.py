"""Collect command for sysfacts CLI.

This module provides the `facts collect` command that runs plugins and prints
the collected facts as JSON.
"""

from pathlib import Path
from typing import Annotated

import typer

from sysfacts.cli.session import EXIT_GRAPH_ERROR, open_system
from sysfacts.plugins.errors import DependencyCycleError, NoAttributeError
from sysfacts.system import FactSystem


def _print_attributes(system: FactSystem, attributes: list[str]) -> None:
    for attribute in attributes:
        try:
            typer.echo(system.attributes_print(attribute))
        except ValueError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(EXIT_GRAPH_ERROR) from e


def collect_command(
    attributes: Annotated[
        list[str] | None,
        typer.Argument(help="Fact paths to collect and print (default: all)"),
    ] = None,
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
    safe: Annotated[
        bool | None,
        typer.Option(
            "--safe/--strict",
            help="Catch plugin errors (default from settings)",
        ),
    ] = None,
    best_effort: Annotated[
        bool,
        typer.Option(
            "--best-effort",
            help="Collect plugin by plugin, ignoring dependency errors",
        ),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            "-l",
            help="Log level (debug, info, warning, error, critical)",
        ),
    ] = None,
) -> None:
    """Run fact plugins and print the collected facts.

    By default every plugin runs in dependency order and a dependency cycle
    or missing dependency stops the run with exit code 1.

    Examples:
        facts collect                     # Print every fact
        facts collect kernel/name         # Print one fact
        facts collect -d ./plugins --strict
    """
    system = open_system(config, plugin_path, log_level)
    if safe is None:
        safe = system.settings.safe

    if best_effort:
        system.all_plugins()
    else:
        try:
            if attributes:
                for attribute in attributes:
                    system.run_plugins(safe=safe, attribute=attribute)
            else:
                system.run_plugins(safe=safe)
        except (DependencyCycleError, NoAttributeError) as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(EXIT_GRAPH_ERROR) from e

    if attributes:
        _print_attributes(system, attributes)
    else:
        typer.echo(system.json_pretty_print())
