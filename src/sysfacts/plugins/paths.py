"""Fact path addressing.

Fact paths are hierarchical keys such as ``cpu/0/mhz`` that identify one
datum in the fact store and one node in the attribute registry.

Classes:
    - FactPath: Immutable sequence of path segments
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

SEPARATOR = "/"


@dataclass(frozen=True)
class FactPath:
    """Immutable, hashable fact path.

    Attributes:
        segments: The path segments, outermost first. The root path has
            no segments.

    Example:
        >>> path = FactPath.parse("water/formula")
        >>> path.segments
        ('water', 'formula')
        >>> str(path)
        'water/formula'
    """

    segments: tuple[str, ...] = ()

    @classmethod
    def parse(cls, value: str | FactPath) -> FactPath:
        """Build a path from its slash-separated string form.

        Leading, trailing and repeated separators are ignored, so ``"/"``
        and ``""`` both parse to the root path.
        """
        if isinstance(value, FactPath):
            return value
        return cls(tuple(part for part in value.split(SEPARATOR) if part))

    @property
    def is_root(self) -> bool:
        """Return True for the empty path."""
        return not self.segments

    def without_os(self, os_name: str | None) -> FactPath:
        """Drop segments equal to the host OS identifier.

        OS segments are a namespacing convention for plugins, not a real
        nesting level, so ``linux/kernel/name`` and ``kernel/name`` address
        the same attribute on a linux host.
        """
        if not os_name:
            return self
        return FactPath(tuple(part for part in self.segments if part != os_name))

    def __iter__(self) -> Iterator[str]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __str__(self) -> str:
        return SEPARATOR.join(self.segments)
