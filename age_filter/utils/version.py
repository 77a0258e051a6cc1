"""
Version stability utilities for the registry age filter.

This module classifies version strings as stable releases or pre-releases
so that pre-releases are never offered as a replacement for the latest tag.
"""

import re

# Any of these, anywhere in the version string and in any case, marks a pre-release
PRERELEASE_MARKERS = (
    "alpha",
    "beta",
    "rc",
    "experimental",
    "next",
    "canary",
    "dev",
    "preview",
    "pre",
    "test",
    "snapshot",
)

# Date-based snapshots such as 1.0.0-20240131
DATE_SNAPSHOT_PATTERN = re.compile(r"-\d{8}")

_MARKER_PATTERN = re.compile("|".join(map(re.escape, PRERELEASE_MARKERS)), re.IGNORECASE)


def is_stable_version(version: str | None) -> bool:
    """
    Check if a version string represents a stable release.

    Matching is a substring search, so ``1.0.0-beta.1``, ``2.0.0rc1`` and
    ``0.0.0-nextgen`` are all pre-releases. An empty or missing version has
    no marker and is therefore stable; callers that care must guard it.

    Args:
        version: Version string to check (e.g., "1.2.3" or "1.2.3-beta0")

    Returns:
        True if the version is stable, False if it's a pre-release

    Examples:
        >>> is_stable_version("1.2.3")
        True
        >>> is_stable_version("1.2.3-beta0")
        False
        >>> is_stable_version("3.0.0-20240131")
        False
    """
    if not version:
        return True

    if _MARKER_PATTERN.search(version):
        return False

    return DATE_SNAPSHOT_PATTERN.search(version) is None


def filter_stable_versions(versions: list[str]) -> list[str]:
    """
    Filter a list of versions to include only stable releases.

    Args:
        versions: List of version strings to filter

    Returns:
        List containing only stable versions, in the same order as input

    Examples:
        >>> filter_stable_versions(["1.2.3", "1.2.3-beta0", "1.2.2"])
        ['1.2.3', '1.2.2']
        >>> filter_stable_versions([])
        []
    """
    if not versions:
        return []

    return [v for v in versions if is_stable_version(v)]
