"""Pragmatic version parsing and ordering for fix suggestions.

This is a best-effort comparator, not a semantic-versioning engine. It
understands ``major[.minor][.patch][-|.prerelease]`` with an optional leading
``v`` and nothing more: build metadata, range syntax and multi-part numeric
prerelease precedence are not interpreted. Anything it cannot parse is
ordered by plain string comparison so that ``compare_versions`` stays total
and deterministic for every pair of strings.
"""

import functools
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional

VERSION_PATTERN = re.compile(r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:[-.](.+))?$")


@dataclass(frozen=True)
class ParsedVersion:
    """Numeric view of a version string."""

    major: int
    minor: int
    patch: int
    prerelease: Optional[str]
    original: str

    @property
    def release(self) -> tuple:
        return (self.major, self.minor, self.patch)


def parse_version(version: str) -> Optional[ParsedVersion]:
    """Parse a loosely structured version string.

    Args:
        version: Version string such as ``1.2.3``, ``v2``, ``1.0.0-beta.1``

    Returns:
        ParsedVersion, or None when the string does not look like a version
    """
    if not isinstance(version, str):
        return None

    cleaned = version[1:] if version.startswith("v") else version
    match = VERSION_PATTERN.match(cleaned)
    if not match:
        return None

    major, minor, patch, prerelease = match.groups()
    return ParsedVersion(
        major=int(major),
        minor=int(minor or 0),
        patch=int(patch or 0),
        prerelease=prerelease or None,
        original=version,
    )


def _compare_strings(a: str, b: str) -> int:
    return (a > b) - (a < b)


def compare_versions(a: str, b: str) -> int:
    """Order two version strings.

    Returns:
        Negative if ``a < b``, zero if equal, positive if ``a > b``
    """
    parsed_a = parse_version(a)
    parsed_b = parse_version(b)

    if parsed_a is None or parsed_b is None:
        return _compare_strings(a, b)

    if parsed_a.release != parsed_b.release:
        return -1 if parsed_a.release < parsed_b.release else 1

    # A prerelease sorts below the release it precedes
    if parsed_a.prerelease and not parsed_b.prerelease:
        return -1
    if not parsed_a.prerelease and parsed_b.prerelease:
        return 1
    if parsed_a.prerelease and parsed_b.prerelease:
        return _compare_strings(parsed_a.prerelease, parsed_b.prerelease)

    return 0


def is_version_greater_or_equal(version: str, target: str) -> bool:
    return compare_versions(version, target) >= 0


version_sort_key: Callable[[str], Any] = functools.cmp_to_key(compare_versions)
