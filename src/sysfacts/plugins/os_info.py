"""Host operating system identification.

The OS identifier names the plugin subdirectory scanned for OS-specific
plugins and is the path segment treated as transparent in dependency paths.
"""

import re
import sys

# Ordered: first match wins.
_OS_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"aix"), "aix"),
    (re.compile(r"darwin"), "darwin"),
    (re.compile(r"hpux"), "hpux"),
    (re.compile(r"linux"), "linux"),
    (re.compile(r"freebsd"), "freebsd"),
    (re.compile(r"openbsd"), "openbsd"),
    (re.compile(r"netbsd"), "netbsd"),
    (re.compile(r"solaris|sunos"), "solaris2"),
    (re.compile(r"win32|cygwin|msys|mingw|windows"), "windows"),
]


def collect_os(platform: str | None = None) -> str:
    """Return the OS identifier for ``platform`` (default: the running host).

    Example:
        >>> collect_os("linux")
        'linux'
        >>> collect_os("sunos5")
        'solaris2'
    """
    platform = (platform or sys.platform).lower()
    for pattern, name in _OS_PATTERNS:
        if pattern.search(platform):
            return name
    return platform


def is_windows(os_name: str | None = None) -> bool:
    """Return True when ``os_name`` (default: the running host) is windows."""
    return (os_name or collect_os()) == "windows"
