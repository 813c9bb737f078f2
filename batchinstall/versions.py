"""Version parsing and comparison utilities."""

import re

from packaging import version as pkg_version


def extract_version_number(version_str: str | None) -> str:
    """Extract the first version number from free-form command output."""
    if not version_str:
        return ""

    patterns = [
        r"v?(\d+\.\d+\.\d+(?:\.\d+)?(?:-[0-9A-Za-z.]+)?)",  # 1.2.3, 1.2.3.4, 1.2.3-preview1
        r"v?(\d+\.\d+)",  # 1.2
        r"v?(\d+)",  # 1
    ]

    for pattern in patterns:
        match = re.search(pattern, version_str)
        if match:
            return match.group(1)

    return ""


def compare_versions(version1: str, version2: str) -> int:
    """Compare two version strings. Returns -1, 0, or 1.

    Uses PEP 440 ordering where both sides parse, otherwise falls back
    to comparing dotted integer tuples, and finally plain strings.
    """
    v1_text = extract_version_number(version1) or version1
    v2_text = extract_version_number(version2) or version2

    try:
        v1 = pkg_version.parse(v1_text)
        v2 = pkg_version.parse(v2_text)
    except pkg_version.InvalidVersion:
        try:
            v1 = tuple(int(part) for part in v1_text.split("-")[0].split("."))
            v2 = tuple(int(part) for part in v2_text.split("-")[0].split("."))
        except ValueError:
            v1, v2 = v1_text, v2_text

    if v1 < v2:
        return -1
    elif v1 > v2:
        return 1
    return 0


def is_version_satisfied(installed: str | None, required: str) -> bool:
    """True if ``installed`` is at least ``required``."""
    if not installed:
        return False
    return compare_versions(installed, required) >= 0


__all__ = [
    "extract_version_number",
    "compare_versions",
    "is_version_satisfied",
]
