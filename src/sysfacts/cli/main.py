"""sysfacts CLI entry point.

This module provides the main Typer application and entry point for the
`facts` CLI.

Usage:
    facts collect [ATTRIBUTE...]  - Run plugins and print facts
    facts refresh PATH            - Re-run the plugins under PATH
    facts plugins                 - List loaded plugins
    facts version                 - Show version information
"""

import typer

from sysfacts.cli.commands import collect, plugins, refresh, version

app = typer.Typer(
    name="facts",
    help="sysfacts CLI - Collect system facts from dependency-ordered plugins",
    no_args_is_help=True,
)

app.command(name="collect")(collect.collect_command)
app.command(name="refresh")(refresh.refresh_command)
app.command(name="plugins")(plugins.plugins_command)
app.command(name="version")(version.version_command)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
