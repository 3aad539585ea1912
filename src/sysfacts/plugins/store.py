"""Path-addressed fact store.

The fact store is the tree of values that plugins write while collecting.
It is keyed the same way as the attribute registry, so ``facts["water/formula"]``
reads the ``formula`` entry of the ``water`` mapping.

Classes:
    - FactStore: Mutable nested mapping with path-based access
"""

import copy
from collections.abc import Iterator, MutableMapping
from typing import Any

from sysfacts.plugins.paths import FactPath

_MISSING = object()


class FactStore(MutableMapping):
    """Nested fact tree with slash-separated path access.

    Keys may be plain top-level names or paths. Writing to a path creates
    intermediate mappings; reading walks the tree and raises KeyError at the
    first missing segment.

    Example:
        facts = FactStore()
        facts["water/formula"] = "H2O"
        facts["water"]            # {"formula": "H2O"}
        facts.get("ice/needs")    # None
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data if data is not None else {}

    def _lookup(self, path: FactPath) -> Any:
        node: Any = self._data
        for part in path:
            if isinstance(node, dict) and part in node:
                node = node[part]
            elif isinstance(node, list) and part.isdigit() and int(part) < len(node):
                node = node[int(part)]
            else:
                return _MISSING
        return node

    def __getitem__(self, key: str | FactPath) -> Any:
        path = FactPath.parse(key)
        if path.is_root:
            return self._data
        value = self._lookup(path)
        if value is _MISSING:
            raise KeyError(str(path))
        return value

    def __setitem__(self, key: str | FactPath, value: Any) -> None:
        path = FactPath.parse(key)
        if path.is_root:
            raise KeyError("cannot assign to the root of the fact store")

        node = self._data
        for part in path.segments[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[path.segments[-1]] = value

    def __delitem__(self, key: str | FactPath) -> None:
        path = FactPath.parse(key)
        if path.is_root:
            raise KeyError("cannot delete the root of the fact store")
        parent = self._lookup(FactPath(path.segments[:-1]))
        if not isinstance(parent, dict) or path.segments[-1] not in parent:
            raise KeyError(str(path))
        del parent[path.segments[-1]]

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (str, FactPath)):
            return False
        return self._lookup(FactPath.parse(key)) is not _MISSING

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def remove(self, key: str | FactPath) -> None:
        """Delete the subtree at ``key``; missing paths are ignored.

        The root path clears the whole store.
        """
        path = FactPath.parse(key)
        if path.is_root:
            self._data.clear()
            return
        if path in self:
            del self[path]

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the whole tree for read-only consumers."""
        return copy.deepcopy(self._data)

    def __repr__(self) -> str:
        return f"FactStore({self._data!r})"
