"""Plugin file loader.

This module turns plugin source files into PluginRecord objects. Plugin
files are plain Python modules; each must define a class named ``Plugin``
that derives from FactPlugin.

Classes:
    - PluginLoader: Loads plugin files into records

Functions:
    - plugin_name_for: Derive a plugin name from its path
    - plugin_filename_for: Map a plugin name back to a relative file path
"""

from __future__ import annotations

import importlib.util
import re
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from sysfacts.plugins.base import FactPlugin, PluginRecord
from sysfacts.plugins.errors import FactsErrorCode, PluginError

if TYPE_CHECKING:
    from sysfacts.system import FactSystem

logger = structlog.get_logger()

NAMESPACE_SEPARATOR = "::"
PLUGIN_SUFFIX = ".py"

_UNSAFE_MODULE_CHARS = re.compile(r"[^0-9A-Za-z_]")


def plugin_name_for(path: Path, search_dir: Path) -> str:
    """Derive the plugin name for ``path`` relative to ``search_dir``.

    Example:
        >>> plugin_name_for(Path("/plugins/linux/cpu.py"), Path("/plugins"))
        'linux::cpu'
    """
    relative = path.relative_to(search_dir).with_suffix("")
    return NAMESPACE_SEPARATOR.join(relative.parts)


def plugin_filename_for(name: str) -> Path:
    """Map a plugin name to its file path relative to a search directory."""
    return Path(*name.split(NAMESPACE_SEPARATOR)).with_suffix(PLUGIN_SUFFIX)


class PluginLoader:
    """Loads plugin files into PluginRecord objects.

    The loader imports each file as an isolated module (it is not added to
    ``sys.modules``), so two files with the same basename in different
    directories never collide.

    Attributes:
        system: The owning fact system, handed to plugin instances.
        plugin_class_name: Name of the plugin class expected in each file.

    Example:
        loader = PluginLoader(system)
        record = loader.load_plugin(Path("/plugins/kernel.py"), "kernel")
        if record is not None:
            registry.index(record)
    """

    def __init__(
        self,
        system: FactSystem | None = None,
        plugin_class_name: str = "Plugin",
    ) -> None:
        self.system = system
        self.plugin_class_name = plugin_class_name

    def _import(self, path: Path, name: str) -> FactPlugin:
        module_name = "sysfacts_plugin_" + _UNSAFE_MODULE_CHARS.sub("_", name)
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise PluginError(
                code=FactsErrorCode.LOAD_FAILED,
                message=f"Cannot import plugin file: {path}",
                plugin_name=name,
            )

        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            raise PluginError(
                code=FactsErrorCode.LOAD_FAILED,
                message=f"Failed to import plugin file {path}: {e}",
                plugin_name=name,
                cause=e,
            ) from e

        plugin_class = getattr(module, self.plugin_class_name, None)
        if plugin_class is None:
            raise PluginError(
                code=FactsErrorCode.LOAD_FAILED,
                message=f"Module does not have class '{self.plugin_class_name}'",
                plugin_name=name,
            )
        if not isinstance(plugin_class, type) or not issubclass(
            plugin_class, FactPlugin
        ):
            raise PluginError(
                code=FactsErrorCode.LOAD_FAILED,
                message=f"Class '{self.plugin_class_name}' is not a FactPlugin",
                plugin_name=name,
            )

        try:
            return plugin_class(self.system)
        except Exception as e:
            raise PluginError(
                code=FactsErrorCode.LOAD_FAILED,
                message=f"Failed to instantiate plugin: {e}",
                plugin_name=name,
                cause=e,
            ) from e

    def _build_record(
        self, plugin: FactPlugin, path: Path, name: str
    ) -> PluginRecord:
        try:
            return PluginRecord.from_plugin(name, plugin, source=path)
        except (TypeError, AttributeError) as e:
            raise PluginError(
                code=FactsErrorCode.LOAD_FAILED,
                message=f"Invalid provides/depends declaration: {e}",
                plugin_name=name,
                cause=e,
            ) from e

    def load_plugin(self, path: Path, name: str) -> PluginRecord | None:
        """Load the plugin file at ``path``.

        A malformed file makes the plugin unavailable; the error is logged
        and None is returned.

        Args:
            path: Canonical path of the plugin file.
            name: Plugin name, as produced by plugin_name_for().

        Returns:
            The loaded record, or None if the file could not be loaded.
        """
        try:
            plugin = self._import(path, name)
            record = self._build_record(plugin, path, name)
        except PluginError as e:
            logger.warning(
                "plugin_load_failed",
                plugin=name,
                path=str(path),
                error=str(e),
            )
            return None

        logger.debug(
            "plugin_loaded",
            plugin=name,
            path=str(path),
            provides=[str(p) for p in record.provides],
            depends=[str(d) for d in record.depends],
        )
        return record
