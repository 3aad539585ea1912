"""Plugins command for sysfacts CLI.

This module provides the `facts plugins` command that lists every loaded
plugin with the facts it provides and depends on.
"""

import json
from pathlib import Path
from typing import Annotated, Any

import typer

from sysfacts.cli.session import open_system
from sysfacts.system import FactSystem


def _build_plugin_data(system: FactSystem) -> list[dict[str, Any]]:
    disabled = system.settings.disabled_plugins
    return [
        {
            "name": name,
            "source": str(record.source) if record.source else None,
            "provides": [str(p) for p in record.provides],
            "depends": [str(d) for d in record.depends],
            "enabled": name not in disabled,
        }
        for name, record in sorted(system.plugins.items())
    ]


def plugins_command(
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
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON",
        ),
    ] = False,
) -> None:
    """List loaded plugins and the facts they provide and depend on."""
    system = open_system(config, plugin_path, "warning")
    plugins = _build_plugin_data(system)

    if json_output:
        typer.echo(json.dumps(plugins, indent=2))
        return

    typer.echo(f"OS: {system.os_name}")
    typer.echo(f"Plugins: {len(plugins)}")
    typer.echo()

    for plugin in plugins:
        state = "enabled" if plugin["enabled"] else "disabled"
        typer.echo(f"{plugin['name']} ({state})")
        typer.echo(f"  Provides: {', '.join(plugin['provides']) or '-'}")
        typer.echo(f"  Depends: {', '.join(plugin['depends']) or '-'}")
