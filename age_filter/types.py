"""
Shared type definitions for the registry age filter.

This module contains the package record built from registry metadata,
the age policy, and the decisions produced by the version selector.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Union

ONE_DAY = timedelta(days=1)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO 8601 timestamp and normalize it to UTC."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        # OverflowError: an offset pushed the first or last representable day out of range
        return None


@dataclass
class PackageRecord:
    """Registry metadata for one package, reduced to what age decisions need."""

    name: str
    versions: set[str] = field(default_factory=set)
    publish_times: dict[str, datetime] = field(default_factory=dict)
    dist_tags: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_manifest(cls, manifest: Any, name: str | None = None) -> "PackageRecord | None":
        """
        Build a record from a registry package document.

        Returns None when the document has no usable ``time`` or ``versions``
        map, so callers treat it as "nothing to evaluate". Individual
        timestamps that cannot be parsed are dropped.

        Args:
            manifest: Decoded JSON package document
            name: Package name, defaults to the document's ``name`` field

        Returns:
            PackageRecord, or None if the metadata is unusable
        """
        if not isinstance(manifest, Mapping):
            return None

        time_data = manifest.get("time")
        versions_data = manifest.get("versions")
        if not isinstance(time_data, Mapping) or not isinstance(versions_data, Mapping):
            return None

        publish_times = {}
        for version, timestamp in time_data.items():
            published = parse_timestamp(timestamp)
            if published is not None:
                publish_times[version] = published

        dist_tags_data = manifest.get("dist-tags")
        dist_tags = {}
        if isinstance(dist_tags_data, Mapping):
            dist_tags = {
                tag: version
                for tag, version in dist_tags_data.items()
                if isinstance(version, str)
            }

        return cls(
            name=name or str(manifest.get("name", "")),
            # A version only counts when it carries release metadata
            versions={version for version, meta in versions_data.items() if meta},
            publish_times=publish_times,
            dist_tags=dist_tags,
        )


@dataclass(frozen=True)
class Policy:
    """Age policy applied uniformly to every package."""

    max_age: timedelta = timedelta(days=7)

    @property
    def threshold_days(self) -> float:
        """The configured age floor expressed in days."""
        return self.max_age / ONE_DAY


@dataclass(frozen=True)
class Pass:
    """Forward the registry response unchanged."""


@dataclass(frozen=True)
class Rewrite:
    """Serve ``chosen_version`` as the latest dist-tag."""

    chosen_version: str
    latest_version: str | None = field(default=None, compare=False)
    latest_age: timedelta | None = field(default=None, compare=False)
    chosen_age: timedelta | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Reject:
    """Refuse the request: every stable version is younger than the age floor."""

    threshold_days: float
    latest_version: str | None = field(default=None, compare=False)
    latest_age: timedelta | None = field(default=None, compare=False)


Decision = Union[Pass, Rewrite, Reject]
