"""Bucket filtering and relevance scoring."""

from scoring.engine import ProfileMatchers, filter_bucket, score_buckets, score_posting
from scoring.matchers import Gate, includes_all, includes_any

__all__ = [
    "Gate",
    "ProfileMatchers",
    "filter_bucket",
    "includes_all",
    "includes_any",
    "score_buckets",
    "score_posting",
]
