"""Lifecycle reconciler: merge a run's scored postings with the previous output.

A posting's identity is its normalized (company, title, location, url). A
posting seen again keeps the ``fetched_at`` of its first sighting and gets
``pulled_at`` bumped to the current run, so staleness measures how long it
has been listed. Postings listed in the current run never go inactive;
postings that drop out of the feeds age through stale and inactive purely
on elapsed time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

import structlog

from schemas.config import Knobs
from schemas.output import OutputDocument
from schemas.posting import DatedPosting, ScoredPosting
from schemas.profile import RoleProfile

logger = structlog.get_logger(__name__)

SECONDS_PER_DAY = 86_400


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO timestamp; naive values are taken as UTC. Returns None if unparseable."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def compute_stale_days(fetched_at: str | None, now: datetime, stale_after_days: int) -> int:
    """Whole days since ``fetched_at``, never negative.

    An unparseable timestamp counts as one day past the stale threshold.
    """
    fetched = parse_timestamp(fetched_at)
    if fetched is None:
        return stale_after_days + 1
    elapsed = (now - fetched).total_seconds()
    return max(0, int(elapsed // SECONDS_PER_DAY))


def to_dated(posting: ScoredPosting, run_at: str) -> DatedPosting:
    """Stamp a freshly scored posting with the current run time."""
    return DatedPosting(**posting.model_dump(), fetched_at=run_at, pulled_at=run_at)


def _earliest(first: str, second: str) -> str:
    a, b = parse_timestamp(first), parse_timestamp(second)
    if a is None:
        return second if b is not None else first
    if b is None:
        return first
    return first if a <= b else second


def merge_postings(prior: list[DatedPosting], fresh: list[DatedPosting]) -> list[DatedPosting]:
    """Merge prior and fresh postings by identity.

    Fresh records replace prior ones field for field, except ``fetched_at``
    which keeps the earliest parseable value. Merging a list with itself
    returns the same list.
    """
    merged: dict[str, DatedPosting] = {}
    for posting in prior:
        existing = merged.get(posting.identity)
        if existing is None:
            merged[posting.identity] = posting
        else:
            merged[posting.identity] = existing.model_copy(
                update={"fetched_at": _earliest(existing.fetched_at, posting.fetched_at)}
            )

    for posting in fresh:
        existing = merged.get(posting.identity)
        if existing is None:
            merged[posting.identity] = posting
        else:
            merged[posting.identity] = posting.model_copy(
                update={"fetched_at": _earliest(existing.fetched_at, posting.fetched_at)}
            )
    return list(merged.values())


def sort_dated(postings: list[DatedPosting]) -> list[DatedPosting]:
    """Most recent ``fetched_at`` first, ties by score; unparseable timestamps last."""

    def key(posting: DatedPosting) -> tuple[int, float, int]:
        fetched = parse_timestamp(posting.fetched_at)
        if fetched is None:
            return (0, 0.0, posting.score)
        return (1, fetched.timestamp(), posting.score)

    return sorted(postings, key=key, reverse=True)


def apply_staleness(postings: list[DatedPosting], now: datetime, stale_after_days: int) -> list[DatedPosting]:
    out = []
    for posting in postings:
        days = compute_stale_days(posting.fetched_at, now, stale_after_days)
        out.append(posting.model_copy(update={"stale_days": days, "is_stale": days >= stale_after_days}))
    return out


def partition_inactive(
    postings: list[DatedPosting],
    inactive_after_days: int,
    listed: set[str] | frozenset[str] = frozenset(),
) -> tuple[list[DatedPosting], list[DatedPosting]]:
    """Split into (active, inactive). Every posting lands in exactly one side.

    Identities in ``listed`` were observed this run and always stay active.
    """
    active: list[DatedPosting] = []
    inactive: list[DatedPosting] = []
    for posting in postings:
        gone = posting.identity not in listed and posting.stale_days >= inactive_after_days
        (inactive if gone else active).append(posting)
    return active, inactive


@dataclass
class BucketLifecycle:
    active: list[DatedPosting] = field(default_factory=list)
    archive: list[DatedPosting] = field(default_factory=list)
    stale: int = 0
    went_inactive: int = 0


def reconcile_bucket(
    fresh: list[ScoredPosting],
    prior_active: list[DatedPosting],
    prior_archive: list[DatedPosting],
    now: datetime,
    knobs: Knobs,
) -> BucketLifecycle:
    """Merge one bucket and split it into active and archived postings.

    The archive holds only postings that went inactive in this run. Archived
    identities that are listed again rejoin the merge with their original
    ``fetched_at``.
    """
    run_at = now.isoformat()
    dated = [to_dated(p, run_at) for p in fresh]
    listed = {p.identity for p in dated}
    returning = [p for p in prior_archive if p.identity in listed]
    merged = sort_dated(merge_postings([*prior_active, *returning], dated))
    merged = apply_staleness(merged, now, knobs.stale_after_days)
    active, inactive = partition_inactive(merged, knobs.inactive_after_days, listed)

    result = BucketLifecycle(
        active=active,
        stale=sum(1 for p in active if p.is_stale),
        went_inactive=len(inactive),
    )
    if knobs.inactive_action == "archive":
        result.archive = inactive
    return result


@dataclass
class LifecycleResult:
    buckets: dict[str, list[DatedPosting]] = field(default_factory=dict)
    archive: dict[str, list[DatedPosting]] = field(default_factory=dict)
    stale_counts: dict[str, int] = field(default_factory=dict)
    inactive_counts: dict[str, int] = field(default_factory=dict)


def reconcile(
    profile: RoleProfile,
    scored: dict[str, list[ScoredPosting]],
    prior: OutputDocument | None,
    now: datetime,
    knobs: Knobs,
) -> LifecycleResult:
    """Reconcile every active bucket of the profile against the prior output."""
    result = LifecycleResult()
    for bucket in profile.active_buckets():
        prior_active = prior.buckets.get(bucket.id, []) if prior else []
        prior_archive = prior.archive.get(bucket.id, []) if prior else []
        outcome = reconcile_bucket(scored.get(bucket.id, []), prior_active, prior_archive, now, knobs)

        result.buckets[bucket.id] = outcome.active
        result.archive[bucket.id] = outcome.archive
        result.stale_counts[bucket.id] = outcome.stale
        result.inactive_counts[bucket.id] = outcome.went_inactive
        logger.debug(
            "bucket reconciled",
            bucket=bucket.id,
            active=len(outcome.active),
            stale=outcome.stale,
            inactive=outcome.went_inactive,
            archived=len(outcome.archive),
        )
    return result
