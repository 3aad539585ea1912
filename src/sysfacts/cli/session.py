"""Shared setup for CLI commands.

Builds a FactSystem from the command-line options and maps engine errors to
exit codes.

Exit codes:
    0: success
    1: a dependency cycle or missing dependency stopped the run
    2: the configuration could not be loaded
"""

import logging
import sys
from pathlib import Path

import structlog
import typer
import yaml
from pydantic import ValidationError

from sysfacts.plugins.config import LOG_LEVELS, FactsSettings, load_settings
from sysfacts.system import FactSystem

EXIT_GRAPH_ERROR = 1
EXIT_CONFIG_ERROR = 2

DEFAULT_SETTINGS = Path("./settings.yml")


def configure_logging(level: str) -> None:
    """Send structlog output to stderr, filtered at ``level``."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def build_settings(
    config: Path | None,
    plugin_path: list[Path] | None,
    log_level: str | None,
) -> FactsSettings:
    """Load settings and apply command-line overrides.

    An explicit ``--config`` must exist. Without one, ``./settings.yml`` is
    used when present and defaults otherwise.

    Raises:
        typer.Exit: With EXIT_CONFIG_ERROR if the settings cannot be loaded.
    """
    if config is None and DEFAULT_SETTINGS.exists():
        config = DEFAULT_SETTINGS

    try:
        settings = load_settings(config) if config is not None else FactsSettings()
    except FileNotFoundError as e:
        typer.echo(f"Error: Settings file not found: {config}", err=True)
        raise typer.Exit(EXIT_CONFIG_ERROR) from e
    except yaml.YAMLError as e:
        typer.echo(f"Error: Invalid YAML in {config}: {e}", err=True)
        raise typer.Exit(EXIT_CONFIG_ERROR) from e
    except (ValidationError, ValueError) as e:
        typer.echo(f"Error: Failed to load settings: {e}", err=True)
        raise typer.Exit(EXIT_CONFIG_ERROR) from e

    if plugin_path:
        settings.plugin_path = [*plugin_path, *settings.plugin_path]
    if log_level:
        if log_level.lower() not in LOG_LEVELS:
            typer.echo(f"Error: Unknown log level '{log_level}'", err=True)
            raise typer.Exit(EXIT_CONFIG_ERROR)
        settings.log_level = log_level.lower()
    return settings


def open_system(
    config: Path | None,
    plugin_path: list[Path] | None,
    log_level: str | None,
) -> FactSystem:
    """Build settings, configure logging and load every plugin."""
    settings = build_settings(config, plugin_path, log_level)
    configure_logging(settings.log_level)
    system = FactSystem(settings)
    system.load_plugins()
    return system
