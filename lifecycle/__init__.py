"""Active / stale / inactive lifecycle across runs."""

from lifecycle.reconciler import (
    BucketLifecycle,
    LifecycleResult,
    compute_stale_days,
    merge_postings,
    parse_timestamp,
    partition_inactive,
    reconcile,
    reconcile_bucket,
    sort_dated,
)

__all__ = [
    "BucketLifecycle",
    "LifecycleResult",
    "compute_stale_days",
    "merge_postings",
    "parse_timestamp",
    "partition_inactive",
    "reconcile",
    "reconcile_bucket",
    "sort_dated",
]
