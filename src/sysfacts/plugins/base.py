"""Core plugin interfaces and records.

This module defines the fundamental building blocks of the sysfacts plugin system:
    - ResolutionStatus: Tri-color marking used for dependency cycle detection
    - FactPlugin: Abstract base class that every plugin file implements
    - PluginRecord: The engine's resolved, in-memory view of one provider
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from sysfacts.plugins.paths import FactPath

if TYPE_CHECKING:
    from sysfacts.plugins.store import FactStore
    from sysfacts.system import FactSystem


def _parse_paths(paths: Iterable[str] | str) -> tuple[FactPath, ...]:
    if isinstance(paths, str):
        paths = (paths,)
    return tuple(FactPath.parse(p) for p in paths)


class ResolutionStatus(str, Enum):
    """Resolution states for a plugin during a dependency walk.

    State transitions:
        UNRESOLVED -> IN_PROGRESS: the walk enters the plugin
        IN_PROGRESS -> RESOLVED: every dependency has run
        IN_PROGRESS -> UNRESOLVED: a structural error unwound the walk
        RESOLVED -> UNRESOLVED: the plugin was refreshed

    Entering a plugin that is IN_PROGRESS means the walk has come back
    around to it through its own dependencies.
    """

    UNRESOLVED = "unresolved"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


class FactPlugin(ABC):
    """Abstract base class for fact plugins.

    A plugin file is a Python module under one of the configured plugin
    directories that defines a class named ``Plugin`` deriving from this one.

    Subclasses declare the fact paths they provide and depend on as class
    attributes and MUST implement ``collect()``.

    Example:
        class Plugin(FactPlugin):
            provides = ("water", "water/formula")
            depends = ("oxygen", "hydrogen")

            def collect(self, facts: FactStore) -> None:
                facts["water"] = {"formula": facts["hydrogen"] + "2" + facts["oxygen"]}
    """

    provides: ClassVar[Iterable[str]] = ()
    depends: ClassVar[Iterable[str]] = ()

    def __init__(self, system: FactSystem | None = None) -> None:
        """Initialize the plugin.

        Args:
            system: The owning fact system, used for hint lookups.
        """
        self.system = system

    @abstractmethod
    def collect(self, facts: FactStore) -> None:
        """Gather facts and write them into the store.

        Dependencies declared in ``depends`` have already run when this is
        called. Any exception raised here is a provider error.

        Args:
            facts: The shared fact store.
        """
        ...

    def hint(self, name: str) -> Any:
        """Return the parsed hint document ``name``, or None."""
        if self.system is None:
            return None
        return self.system.hint(name)


@dataclass(eq=False)
class PluginRecord:
    """Resolved, in-memory representation of one provider.

    Records compare by identity: two records for the same file are never
    created by the engine.

    Attributes:
        name: Stable name derived from the source path (``linux::cpu``).
        provides: Fact paths this plugin is the declared source of.
        depends: Fact paths that must exist before this plugin runs.
        collect: The collection body; mutates the fact store and may raise.
        source: Canonical file path the record was loaded from, if any.
        status: Current resolution status.
        has_run: True once ``collect`` has been invoked.
    """

    name: str
    provides: tuple[FactPath, ...] = ()
    depends: tuple[FactPath, ...] = ()
    collect: Callable[[FactStore], None] = field(default=lambda facts: None)
    source: Path | None = None
    status: ResolutionStatus = ResolutionStatus.UNRESOLVED
    has_run: bool = False

    @classmethod
    def from_plugin(
        cls,
        name: str,
        plugin: FactPlugin,
        source: Path | None = None,
    ) -> PluginRecord:
        """Build a record from an instantiated plugin.

        A single string is accepted in place of a sequence for both
        ``provides`` and ``depends``.
        """
        return cls(
            name=name,
            provides=_parse_paths(plugin.provides),
            depends=_parse_paths(plugin.depends),
            collect=plugin.collect,
            source=source,
        )

    def reset(self) -> None:
        """Forget run state so the next walk runs the plugin again."""
        self.status = ResolutionStatus.UNRESOLVED
        self.has_run = False

    def __repr__(self) -> str:
        return (
            f"PluginRecord({self.name!r}, status={self.status.value}, "
            f"has_run={self.has_run})"
        )
