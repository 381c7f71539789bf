"""Semantic version helpers for npm-style version specs."""

import re

_VERSION_PREFIX = re.compile(r'^[\s^~>=<v]*')
_NUMERIC_PART = re.compile(r'^(\d+)')


def get_version(spec: object) -> str:
    """Extract a plain version from an npm version spec.

    Range operators are stripped and the lower bound of a
    ``a - b`` or ``a || b`` range is used.

    Example:
        >>> get_version("^17.0.2")
        '17.0.2'
    """
    if not isinstance(spec, str):
        return "0.0.0"
    first = spec.split("||")[0].split(" - ")[0].strip()
    first = _VERSION_PREFIX.sub("", first)
    return first or "0.0.0"


def _parts(version: str) -> list[int]:
    parts: list[int] = []
    for chunk in version.split("-")[0].split(".")[:3]:
        match = _NUMERIC_PART.match(chunk)
        parts.append(int(match.group(1)) if match else 0)
    while len(parts) < 3:
        parts.append(0)
    return parts


def compare_versions(left: str, right: str) -> int:
    """Compare two versions numerically.

    Returns:
        -1, 0 or 1 when left is lower, equal or higher than right
    """
    a, b = _parts(left), _parts(right)
    if a == b:
        return 0
    return 1 if a > b else -1


def version_at_least(version: str, minimum: str) -> bool:
    """Return True when ``version`` >= ``minimum``."""
    return compare_versions(version, minimum) >= 0


def major_version(spec: object) -> int:
    """Return the major component of an npm version spec (0 if unknown)."""
    return _parts(get_version(spec))[0]
