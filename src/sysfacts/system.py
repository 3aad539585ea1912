"""Fact collection engine.

This module provides FactSystem, the owner of every piece of run state:
    - the attribute registry built while loading plugins
    - the fact store that plugins write into
    - the load and run caches (loaded_plugins, seen_plugins, hints)

It exposes two ways of running plugins:
    - run_plugins() / resolve_and_run(): dependency-exact. Plugins run after
      their dependencies, and a missing dependency or a dependency cycle
      stops the run.
    - require_plugin() / all_plugins() / refresh_plugins(): best-effort.
      Plugins are collected one by one and any failure is logged, never
      raised.

Usage:
    system = FactSystem(FactsSettings(plugin_path=[Path("/etc/sysfacts/plugins")]))
    system.load_plugins()
    system.run_plugins(safe=True)
    print(system.json_pretty_print())
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog

from sysfacts.plugins.base import PluginRecord, ResolutionStatus
from sysfacts.plugins.config import FactsSettings
from sysfacts.plugins.errors import (
    DependencyCycleError,
    FactsErrorCode,
    NoAttributeError,
    PluginError,
)
from sysfacts.plugins.loader import (
    PLUGIN_SUFFIX,
    PluginLoader,
    plugin_filename_for,
    plugin_name_for,
)
from sysfacts.plugins.os_info import collect_os, is_windows
from sysfacts.plugins.paths import FactPath
from sysfacts.plugins.registry import AttributeRegistry
from sysfacts.plugins.store import FactStore

logger = structlog.get_logger()


class FactSystem:
    """Loads fact plugins, runs them in dependency order and holds the facts.

    Design Note:
        All caches live on the instance rather than at module level, so
        every FactSystem is an independent collection session. Tests
        construct one per case.

    Attributes:
        settings: Read-only configuration.
        os_name: Host OS identifier used for plugin subdirectories and
            transparent path segments.
        data: The fact store.
        registry: The attribute registry.
        hints: Cache of parsed hint documents, keyed by hint name.
        seen_plugins: Names of plugins already collected by require_plugin().
        loaded_plugins: Records keyed by canonical source path.

    Example:
        system = FactSystem(settings)
        system.load_plugins()
        system.run_plugins()
        system["kernel/name"]
    """

    def __init__(
        self,
        settings: FactsSettings | None = None,
        loader: PluginLoader | None = None,
    ) -> None:
        """Initialize an empty system.

        Args:
            settings: Configuration (defaults to FactsSettings()).
            loader: Plugin loader (defaults to a PluginLoader bound to this
                system).
        """
        self.settings = settings or FactsSettings()
        self.os_name = self.settings.os or collect_os()
        self.data = FactStore()
        self.registry = AttributeRegistry(os_name=self.os_name)
        self.hints: dict[str, Any] = {}
        self.seen_plugins: set[str] = set()
        self.loaded_plugins: dict[Path, PluginRecord] = {}
        self._plugins_by_name: dict[str, PluginRecord] = {}
        self._loader = loader or PluginLoader(self)

    def __getitem__(self, key: str | FactPath) -> Any:
        """Return the fact at ``key``, or None if it was never collected."""
        return self.data.get(key)

    @property
    def plugins(self) -> dict[str, PluginRecord]:
        """Return every known plugin record keyed by name."""
        return dict(self._plugins_by_name)

    # Loading

    def _plugin_files(
        self, search_dir: Path, os_name: str | None = None
    ) -> list[Path]:
        """List plugin files in ``search_dir`` and its OS subdirectory."""
        if not search_dir.is_dir():
            return []

        files = sorted(search_dir.glob(f"*{PLUGIN_SUFFIX}"))
        os_dir = search_dir / (os_name or self.os_name)
        if os_dir.is_dir():
            files.extend(sorted(os_dir.rglob(f"*{PLUGIN_SUFFIX}")))
        return [f for f in files if f.is_file() and not f.name.startswith("_")]

    def add_plugin(self, record: PluginRecord) -> PluginRecord:
        """Make ``record`` known to the system and index what it provides.

        Returns:
            The record, or the already-known record with the same name.
        """
        existing = self._plugins_by_name.get(record.name)
        if existing is not None:
            return existing

        self._plugins_by_name[record.name] = record
        if record.source is not None:
            self.loaded_plugins[record.source] = record
        self.registry.index(record)
        return record

    def _load_file(self, path: Path, name: str) -> PluginRecord | None:
        path = path.resolve()
        record = self.loaded_plugins.get(path)
        if record is not None:
            return record

        record = self._loader.load_plugin(path, name)
        if record is None:
            return None

        known = self.add_plugin(record)
        if known is not record:
            logger.debug(
                "plugin_name_shadowed",
                plugin=name,
                path=str(path),
                loaded_from=str(known.source),
            )
        self.loaded_plugins[path] = known
        return known

    def load_plugins(self) -> None:
        """Load every plugin file under the configured plugin directories.

        Each directory's root and its ``<os>`` subdirectory are scanned.
        A file is loaded at most once, keyed by its canonical path, and the
        resulting record is indexed into the attribute registry.
        """
        for search_dir in self.settings.plugin_path:
            search_dir = search_dir.resolve()
            for path in self._plugin_files(search_dir):
                canonical = path.resolve()
                if canonical in self.loaded_plugins:
                    logger.debug("plugin_already_loaded", path=str(canonical))
                    continue
                self._load_file(canonical, plugin_name_for(path, search_dir))

        logger.info(
            "plugins_loaded",
            plugins=len(self._plugins_by_name),
            attributes=len(self.registry.paths()),
        )

    def plugin_for(self, plugin_name: str) -> PluginRecord | None:
        """Find the record for ``plugin_name``, loading it if needed.

        ``linux::cpu`` maps to ``linux/cpu.py``; the first plugin directory
        containing that file wins.
        """
        record = self._plugins_by_name.get(plugin_name)
        if record is not None:
            return record

        filename = plugin_filename_for(plugin_name)
        for search_dir in self.settings.plugin_path:
            candidate = search_dir / filename
            if candidate.is_file():
                return self._load_file(candidate, plugin_name)
        return None

    # Dependency-exact execution

    def resolve_and_run(self, plugin: PluginRecord, safe: bool = False) -> None:
        """Run ``plugin`` after every provider it depends on.

        Args:
            plugin: The record to run.
            safe: When True, an exception raised by a collect body is
                logged and swallowed. Structural errors always propagate.

        Raises:
            DependencyCycleError: If ``plugin`` is reached again through its
                own dependencies.
            NoAttributeError: If a dependency has no registered provider.
        """
        if plugin.has_run:
            return

        if plugin.status == ResolutionStatus.IN_PROGRESS:
            logger.debug("dependency_cycle_detected", plugin=plugin.name)
            raise DependencyCycleError(plugin.name)

        plugin.status = ResolutionStatus.IN_PROGRESS
        try:
            for dependency in plugin.depends:
                for provider in self._providers_for(dependency, plugin):
                    if provider is plugin:
                        logger.warning(
                            "plugin_depends_on_itself",
                            plugin=plugin.name,
                            attribute=str(dependency),
                        )
                        continue
                    self.resolve_and_run(provider, safe)
        except BaseException:
            plugin.status = ResolutionStatus.UNRESOLVED
            raise

        plugin.status = ResolutionStatus.RESOLVED
        self._collect(plugin, safe)

    def _providers_for(
        self, dependency: FactPath, plugin: PluginRecord
    ) -> list[PluginRecord]:
        try:
            return self.registry.providers_at(dependency)
        except NoAttributeError as e:
            logger.debug(
                "dependency_not_provided",
                plugin=plugin.name,
                attribute=str(dependency),
            )
            raise NoAttributeError(str(dependency), plugin_name=plugin.name) from e

    def _collect(self, plugin: PluginRecord, safe: bool) -> None:
        # has_run is set first so a failing body is never retried this run.
        plugin.has_run = True
        logger.debug("plugin_running", plugin=plugin.name)
        if not safe:
            plugin.collect(self.data)
            return

        try:
            plugin.collect(self.data)
        except Exception as e:
            logger.error(
                "plugin_run_failed",
                plugin=plugin.name,
                error=repr(e),
                exc_info=True,
            )

    def _run_providers(self, providers: Iterable[PluginRecord], safe: bool) -> None:
        try:
            for provider in providers:
                self.resolve_and_run(provider, safe)
        except (DependencyCycleError, NoAttributeError) as e:
            logger.error(
                "plugin_run_aborted",
                error_type=type(e).__name__,
                error=str(e),
            )
            raise

    def run_plugins(self, safe: bool = False, attribute: str | None = None) -> None:
        """Run every registered provider in dependency order.

        Args:
            safe: Whether collect-body errors are caught (see
                resolve_and_run()).
            attribute: Only run providers registered at or below this path.

        Raises:
            DependencyCycleError: If the dependency graph contains a cycle.
            NoAttributeError: If a dependency has no provider, or if
                ``attribute`` is not a registered path. Nothing runs in the
                latter case.
        """
        if attribute is None:
            for providers in self.registry.iter_providers():
                self._run_providers(providers, safe)
        else:
            self._run_providers(
                self.registry.collect_under(attribute, strict=True), safe
            )

    def run_plugin(self, plugin_name: str, safe: bool = False) -> None:
        """Resolve and run a single known plugin by name.

        Raises:
            PluginError: If no plugin with that name is known.
        """
        record = self.plugin_for(plugin_name)
        if record is None:
            raise PluginError(
                code=FactsErrorCode.PLUGIN_NOT_FOUND,
                message=f"No plugin named {plugin_name}",
                plugin_name=plugin_name,
            )
        self._run_providers([record], safe)

    # Best-effort collection

    def require_plugin(self, plugin_name: str, force: bool = False) -> bool:
        """Load and run one plugin, never raising its failures.

        Args:
            plugin_name: Plugin name (``linux::cpu``).
            force: Run again even if the plugin was already seen.

        Returns:
            True if the plugin ran (or had already been seen), False if it
            is disabled, cannot be found, or its dependencies could not be
            resolved. An error raised by its collect body is logged and
            still counts as a run.
        """
        if not force and plugin_name in self.seen_plugins:
            return True

        if plugin_name in self.settings.disabled_plugins:
            logger.debug("plugin_disabled", plugin=plugin_name)
            return False

        plugin = self.plugin_for(plugin_name)
        if plugin is None:
            logger.debug(
                "plugin_not_found",
                plugin=plugin_name,
                plugin_path=[str(p) for p in self.settings.plugin_path],
            )
            return False

        self.seen_plugins.add(plugin_name)
        if force:
            plugin.reset()

        try:
            self.resolve_and_run(plugin, safe=True)
        except Exception as e:
            logger.debug(
                "plugin_require_failed",
                plugin=plugin_name,
                error=repr(e),
                exc_info=True,
            )
            return False
        return True

    def all_plugins(self) -> bool:
        """Collect every plugin found under the plugin directories.

        The ``os`` plugin runs first; its ``os`` fact (or the detected host
        identifier) selects the OS subdirectory that is scanned.
        """
        self.require_plugin("os")
        os_name = self.data.get("os") or self.os_name

        for search_dir in self.settings.plugin_path:
            search_dir = search_dir.resolve()
            for path in self._plugin_files(search_dir, os_name):
                plugin_name = plugin_name_for(path, search_dir)
                if plugin_name not in self.seen_plugins:
                    self.require_plugin(plugin_name)

        if not is_windows(self.os_name):
            reap_children()
        return True

    def refresh_plugins(self, path: str | FactPath = "/") -> None:
        """Re-run every provider registered at or below ``path``.

        The hints cache is dropped, the affected plugins lose both their
        seen status and their run state, the fact subtree at ``path`` is
        removed, and the plugins are required again.
        """
        path = FactPath.parse(path)
        refreshments = self.registry.collect_under(path)
        logger.debug(
            "refreshing_plugins",
            path=str(path),
            plugins=[p.name for p in refreshments],
        )

        self.hints = {}

        for plugin in refreshments:
            self.seen_plugins.discard(plugin.name)
            plugin.reset()

        if not path.is_root and refreshments:
            self.data.remove(path.without_os(self.os_name))

        for plugin in refreshments:
            if plugin.name not in self.seen_plugins:
                self.require_plugin(plugin.name)

    # Hints

    def hint(self, name: str) -> Any:
        """Return the parsed ``<name>.json`` hint file, or None if absent.

        Hint files are looked up in ``settings.hints_path`` order and cached
        until the next refresh.
        """
        if name in self.hints:
            return self.hints[name]

        for hints_dir in self.settings.hints_path:
            candidate = hints_dir / f"{name}.json"
            if not candidate.is_file():
                continue
            try:
                content = candidate.read_text()
                self.hints[name] = json.loads(content) if content.strip() else {}
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(
                    "hint_unreadable",
                    hint=name,
                    path=str(candidate),
                    error=str(e),
                )
                self.hints[name] = {}
            return self.hints[name]
        return None

    # Serialization

    def to_json(self) -> str:
        """Serialize the fact tree as compact JSON."""
        return json.dumps(self.data.to_dict(), separators=(",", ":"), default=str)

    def json_pretty_print(self, item: Any = None) -> str:
        """Render ``item`` (default: the whole fact tree) as indented JSON."""
        if item is None:
            item = self.data.to_dict()
        return json.dumps(item, indent=2, default=str)

    def attributes_print(self, attribute: str) -> str:
        """Render the subtree at ``attribute`` as indented JSON.

        Strings are rendered as a list of their lines.

        Raises:
            ValueError: If the path has no value, or the value is of a type
                that cannot be rendered.
        """
        value = self.data.get(attribute)
        if value is None:
            raise ValueError(f"I cannot find an attribute named {attribute}!")

        if isinstance(value, str):
            return self.json_pretty_print(value.splitlines(keepends=True))
        if isinstance(value, bool) or not isinstance(value, (dict, list, int)):
            raise ValueError(
                "I can only generate JSON for dicts, lists, integers and "
                f"strings. You fed me a {type(value).__name__}!"
            )
        return self.json_pretty_print(value)


def reap_children() -> None:
    """Reap any exited child processes left behind by plugins."""
    try:
        while True:
            pid, _ = os.waitpid(-1, os.WNOHANG)
            if pid == 0:
                break
    except ChildProcessError:
        pass
