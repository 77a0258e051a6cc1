"""
Age-gated version selection.

Decides, for one package, whether the advertised latest version may be served,
which older stable version should replace it, or that no version qualifies.
Everything here is a pure function of its arguments; the caller supplies the
current time and applies the decision.
"""

from datetime import datetime, timedelta

from .types import ONE_DAY, Decision, PackageRecord, Pass, Policy, Reject, Rewrite
from .utils.version import filter_stable_versions

# Keys of the registry ``time`` map that are not versions
SENTINEL_TIME_KEYS = frozenset({"created", "modified"})


def age_in_days(age: timedelta) -> int:
    """Whole days in ``age``, rounded down."""
    return age // ONE_DAY


def find_acceptable_version(
    record: PackageRecord, policy: Policy, now: datetime
) -> str | None:
    """
    Find the newest stable version that is at least ``policy.max_age`` old.

    Versions published at the same instant are ordered by their version
    string, the greatest one wins.

    Args:
        record: Package metadata
        policy: Age policy
        now: Current time, timezone-aware

    Returns:
        The chosen version, or None if no stable version is old enough
    """
    # Timestamp-only entries without release metadata are skipped
    released = [
        version
        for version in record.publish_times
        if version not in SENTINEL_TIME_KEYS and version in record.versions
    ]

    best: tuple[datetime, str] | None = None

    for version in filter_stable_versions(released):
        published = record.publish_times[version]
        if now - published < policy.max_age:
            continue

        if best is None or (published, version) > best:
            best = (published, version)

    return best[1] if best else None


def select_version(
    record: PackageRecord | None, policy: Policy, now: datetime
) -> Decision:
    """
    Decide what to serve as the latest version of a package.

    Incomplete metadata always yields Pass: the filter never blocks an
    install because it could not evaluate a package.

    Args:
        record: Package metadata, or None if it could not be obtained
        policy: Age policy
        now: Current time, timezone-aware

    Returns:
        Pass if latest is old enough or cannot be evaluated,
        Rewrite with the replacement version if latest is too new,
        Reject if latest is too new and nothing else qualifies
    """
    if record is None or not record.publish_times or not record.versions:
        return Pass()

    latest = record.dist_tags.get("latest")
    if not latest:
        return Pass()

    latest_published = record.publish_times.get(latest)
    if latest_published is None:
        return Pass()

    latest_age = now - latest_published
    if latest_age >= policy.max_age:
        return Pass()

    chosen = find_acceptable_version(record, policy, now)
    if chosen is None:
        return Reject(
            threshold_days=policy.threshold_days,
            latest_version=latest,
            latest_age=latest_age,
        )

    return Rewrite(
        chosen_version=chosen,
        latest_version=latest,
        latest_age=latest_age,
        chosen_age=now - record.publish_times[chosen],
    )
