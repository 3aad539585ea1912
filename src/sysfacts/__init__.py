"""sysfacts: system facts collection.

Fact plugins declare which facts they provide and which facts they depend
on. FactSystem loads them, runs them in dependency order and exposes the
resulting fact tree.

Example:
    from sysfacts import FactSystem, FactsSettings

    system = FactSystem(FactsSettings(plugin_path=["/etc/sysfacts/plugins"]))
    system.load_plugins()
    system.run_plugins(safe=True)
    system["kernel/name"]
"""

from sysfacts.plugins.base import FactPlugin
from sysfacts.plugins.config import FactsSettings
from sysfacts.plugins.errors import DependencyCycleError, NoAttributeError
from sysfacts.system import FactSystem

__all__ = [
    "DependencyCycleError",
    "FactPlugin",
    "FactSystem",
    "FactsSettings",
    "NoAttributeError",
]
