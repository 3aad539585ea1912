"""Version command for sysfacts CLI.

This module provides the `facts version` command that displays version information.
"""

import sys
from typing import Annotated

import typer

from sysfacts.plugins.os_info import collect_os


def get_version() -> str:
    """Get the installed sysfacts version.

    Returns:
        Version string or 'unknown' if not found.
    """
    try:
        from importlib.metadata import version

        return version("sysfacts")
    except Exception:
        return "unknown"


def version_command(
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show detailed version information",
        ),
    ] = False,
) -> None:
    """Show sysfacts version information."""
    sysfacts_version = get_version()

    if not verbose:
        typer.echo(f"sysfacts {sysfacts_version}")
        return

    typer.echo(f"sysfacts version: {sysfacts_version}")
    typer.echo(f"Python version: {sys.version}")
    typer.echo(f"Detected OS: {collect_os()}")

    typer.echo("\nDependencies:")
    for dep in ["pydantic", "pyyaml", "structlog", "typer"]:
        try:
            from importlib.metadata import version

            typer.echo(f"  {dep}: {version(dep)}")
        except Exception:
            typer.echo(f"  {dep}: not found")
