"""
Data collectors for roles-radar.

Each adapter fetches one provider's listings and returns normalized
Posting records; the planner and orchestrator fan them out per run.
"""

from collectors.base import FetchTask, SourceAdapter
from collectors.collector import FetchOutcome, dedupe_postings, fetch_all
from collectors.http_client import HttpClient
from collectors.planner import plan_fetch_tasks

__all__ = [
    "FetchOutcome",
    "FetchTask",
    "HttpClient",
    "SourceAdapter",
    "dedupe_postings",
    "fetch_all",
    "plan_fetch_tasks",
]
