"""Attribute registry mapping fact paths to their providers.

This module provides the path-addressed tree that the execution engine uses
to find which plugins provide a given fact.

Classes:
    - AttributeNode: One node of the registry tree
    - AttributeRegistry: Registry of providers keyed by fact path

Provider lists are stored on the node for the exact declared path. A plugin
providing ``water/formula`` is stored on the ``formula`` node below
``water``, not on ``water`` itself.

Example:
    - Plugin "water" provides "water" and "water/formula"
    - Plugin "ice" depends on "water/formula"
    - providers_at("water/formula") returns [water]
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

import structlog

from sysfacts.plugins.base import PluginRecord
from sysfacts.plugins.errors import NoAttributeError
from sysfacts.plugins.paths import FactPath

logger = structlog.get_logger()


@dataclass(eq=False)
class AttributeNode:
    """A node of the attribute registry.

    Attributes:
        providers: Records declaring exactly this path, in registration order.
        children: Child nodes keyed by path segment, in insertion order.
    """

    providers: list[PluginRecord] = field(default_factory=list)
    children: dict[str, AttributeNode] = field(default_factory=dict)

    def walk(self) -> Iterator[AttributeNode]:
        """Yield the nodes of this subtree, children before their parent."""
        for child in self.children.values():
            yield from child.walk()
        yield self


class AttributeRegistry:
    """Registry of fact providers keyed by fact path.

    The registry is built incrementally as plugins are loaded and is only
    mutated by the owning fact system.

    Attributes:
        os_name: Host OS identifier; path segments equal to it are skipped
            when resolving dependencies.

    Example:
        registry = AttributeRegistry(os_name="linux")
        registry.register("kernel/name", kernel_plugin)

        registry.providers_at("kernel/name")        # [kernel_plugin]
        registry.providers_at("linux/kernel/name")  # [kernel_plugin]
        registry.collect_under("kernel")            # [kernel_plugin]
    """

    def __init__(self, os_name: str | None = None) -> None:
        """Initialize an empty registry."""
        self.os_name = os_name
        self._root = AttributeNode()

    def register(self, path: str | FactPath, plugin: PluginRecord) -> None:
        """Record ``plugin`` as a provider of ``path``.

        Intermediate nodes are created as needed. Segments equal to the host
        OS identifier are dropped, as they are for lookups. Registering the
        same plugin twice for the same path is a no-op.
        """
        node = self._root
        for part in FactPath.parse(path).without_os(self.os_name):
            node = node.children.setdefault(part, AttributeNode())

        if plugin not in node.providers:
            node.providers.append(plugin)

    def index(self, plugin: PluginRecord) -> None:
        """Register ``plugin`` under every path it provides."""
        for path in plugin.provides:
            self.register(path, plugin)
        logger.debug(
            "plugin_indexed",
            plugin=plugin.name,
            provides=[str(p) for p in plugin.provides],
        )

    def providers_at(self, path: str | FactPath) -> list[PluginRecord]:
        """Return the providers registered at exactly ``path``.

        Args:
            path: A dependency path. Segments equal to the host OS
                identifier are skipped.

        Returns:
            The provider list (possibly empty if only sub-paths are provided).

        Raises:
            NoAttributeError: If any segment of the path is not registered.
        """
        return list(self._node_at(FactPath.parse(path)).providers)

    def _node_at(self, path: FactPath) -> AttributeNode:
        node = self._root
        for part in path.without_os(self.os_name):
            child = node.children.get(part)
            if child is None:
                raise NoAttributeError(str(path))
            node = child
        return node

    def _subtree(self, path: FactPath) -> AttributeNode:
        # Stops at the deepest existing node.
        node = self._root
        for part in path.without_os(self.os_name):
            child = node.children.get(part)
            if child is None:
                break
            node = child
        return node

    def collect_under(
        self, path: str | FactPath = "", strict: bool = False
    ) -> list[PluginRecord]:
        """Gather every provider registered at or below ``path``.

        Args:
            path: Subtree root. The empty path selects the whole registry.
            strict: When False, a path that only partially exists selects
                the deepest registered node along it. When True, it raises.

        Returns:
            De-duplicated providers in tree order.

        Raises:
            NoAttributeError: If ``strict`` and any segment is not registered.
        """
        path = FactPath.parse(path)
        subtree = self._node_at(path) if strict else self._subtree(path)
        found: dict[int, PluginRecord] = {}
        for node in subtree.walk():
            for plugin in node.providers:
                found.setdefault(id(plugin), plugin)
        return list(found.values())

    def iter_providers(self) -> Iterator[list[PluginRecord]]:
        """Yield provider lists for every registered path.

        Top-level attributes are visited in insertion order; within one
        attribute, sub-paths are visited before the attribute itself.
        """
        for child in self._root.children.values():
            for node in child.walk():
                if node.providers:
                    yield list(node.providers)

    def paths(self) -> list[str]:
        """Return every registered path that has at least one provider."""
        result: list[str] = []

        def visit(node: AttributeNode, prefix: tuple[str, ...]) -> None:
            if node.providers:
                result.append(str(FactPath(prefix)))
            for part, child in node.children.items():
                visit(child, prefix + (part,))

        visit(self._root, ())
        return result

    def __len__(self) -> int:
        """Return the number of distinct registered providers."""
        return len(self.collect_under())

    def __contains__(self, path: object) -> bool:
        """Check whether ``path`` resolves to a registry node."""
        if not isinstance(path, (str, FactPath)):
            return False
        try:
            self.providers_at(path)
        except NoAttributeError:
            return False
        return True
