"""sysfacts plugin system.

Core Components:
    - paths: Fact path addressing (FactPath)
    - base: Plugin interface and records (FactPlugin, PluginRecord)
    - store: The fact tree (FactStore)
    - registry: Attribute-to-provider registry (AttributeRegistry)
    - loader: Plugin file loading (PluginLoader)
    - config: Configuration models (FactsSettings)
    - errors: Error codes and exceptions
"""

from sysfacts.plugins.base import FactPlugin, PluginRecord, ResolutionStatus
from sysfacts.plugins.errors import (
    DependencyCycleError,
    FactsErrorCode,
    NoAttributeError,
    PluginError,
)
from sysfacts.plugins.paths import FactPath

__all__ = [
    "DependencyCycleError",
    "FactPath",
    "FactPlugin",
    "FactsErrorCode",
    "NoAttributeError",
    "PluginError",
    "PluginRecord",
    "ResolutionStatus",
]


def __getattr__(name: str):
    """Lazy import for modules that depend on third-party libraries."""
    if name in ("FactsSettings", "load_settings"):
        from sysfacts.plugins import config

        return getattr(config, name)
    if name == "AttributeRegistry":
        from sysfacts.plugins import registry

        return registry.AttributeRegistry
    if name == "FactStore":
        from sysfacts.plugins import store

        return store.FactStore
    if name == "PluginLoader":
        from sysfacts.plugins import loader

        return loader.PluginLoader
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
