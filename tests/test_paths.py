"""Tests for fact path addressing.

Tests cover:
    - Parsing slash-separated paths
    - Root path handling
    - OS segment transparency
"""

from sysfacts.plugins.paths import FactPath


class TestFactPathParse:
    """Tests for FactPath.parse()."""

    def test_parse_splits_on_slash(self) -> None:
        """Verify segments are split on '/'."""
        assert FactPath.parse("cpu/0/mhz").segments == ("cpu", "0", "mhz")

    def test_parse_ignores_leading_and_repeated_separators(self) -> None:
        """Verify empty segments are dropped."""
        assert FactPath.parse("/water//formula/") == FactPath(("water", "formula"))

    def test_root_path(self) -> None:
        """Verify '' and '/' parse to the root path."""
        assert FactPath.parse("").is_root
        assert FactPath.parse("/").is_root
        assert not FactPath.parse("a").is_root

    def test_parse_returns_existing_path_unchanged(self) -> None:
        """Verify parsing a FactPath is the identity."""
        path = FactPath(("a", "b"))
        assert FactPath.parse(path) is path

    def test_str_round_trips(self) -> None:
        """Verify str() joins segments with '/'."""
        assert str(FactPath.parse("water/formula")) == "water/formula"

    def test_paths_are_hashable(self) -> None:
        """Verify equal paths hash equally."""
        assert len({FactPath.parse("a/b"), FactPath.parse("/a/b")}) == 1


class TestWithoutOs:
    """Tests for the OS segment skip rule."""

    def test_os_segment_is_dropped(self) -> None:
        """Verify segments equal to the OS name are removed."""
        path = FactPath.parse("linux/kernel/name")
        assert path.without_os("linux") == FactPath.parse("kernel/name")

    def test_os_segment_dropped_anywhere(self) -> None:
        """Verify OS segments are dropped at any depth."""
        path = FactPath.parse("kernel/linux/name")
        assert path.without_os("linux") == FactPath.parse("kernel/name")

    def test_other_segments_kept(self) -> None:
        """Verify only the current OS name is transparent."""
        path = FactPath.parse("darwin/kernel")
        assert path.without_os("linux") == path

    def test_no_os_name_keeps_path(self) -> None:
        """Verify a missing OS name leaves the path untouched."""
        path = FactPath.parse("linux/kernel")
        assert path.without_os(None) == path
