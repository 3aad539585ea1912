"""Shared fixtures for sysfacts tests."""

import textwrap
from collections.abc import Callable, Iterable
from pathlib import Path

import pytest
import structlog

from sysfacts.plugins.base import PluginRecord
from sysfacts.plugins.paths import FactPath
from sysfacts.plugins.store import FactStore


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog.configure() made by the CLI during a test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def calls() -> list[str]:
    """Record of plugin names in the order their collect bodies ran."""
    return []


@pytest.fixture
def make_plugin(calls: list[str]) -> Callable[..., PluginRecord]:
    """Factory for in-memory plugin records that log their invocations."""

    def factory(
        name: str,
        provides: Iterable[str] = (),
        depends: Iterable[str] = (),
        body: Callable[[FactStore], None] | None = None,
    ) -> PluginRecord:
        def collect(facts: FactStore) -> None:
            calls.append(name)
            if body is not None:
                body(facts)

        return PluginRecord(
            name=name,
            provides=tuple(FactPath.parse(p) for p in provides),
            depends=tuple(FactPath.parse(d) for d in depends),
            collect=collect,
        )

    return factory


@pytest.fixture
def write_plugin(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a plugin file below tmp_path/plugins and return its path."""
    plugin_dir = tmp_path / "plugins"
    plugin_dir.mkdir(exist_ok=True)

    def writer(relative: str, source: str) -> Path:
        path = plugin_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source))
        return path

    return writer
