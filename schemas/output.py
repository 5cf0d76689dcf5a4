"""Output document schema (roles.v1)."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from .base import BaseSchema
from .posting import DatedPosting

OUTPUT_SCHEMA_VERSION = "roles.v1"


class OutputMeta(BaseSchema):
    stale_after_days: int = 3
    inactive_after_days: int = 7
    inactive_action: Literal["archive", "hard_delete"] = "archive"
    source_counts: dict[str, int] = Field(default_factory=dict)
    stale_counts: dict[str, int] = Field(default_factory=dict)
    inactive_counts: dict[str, int] = Field(default_factory=dict)
    timings_ms: dict[str, int] = Field(default_factory=dict)
    fetched_postings: int = 0
    fetch_timed_out: bool = False


class OutputDocument(BaseSchema):
    """Per-bucket active and archive lists produced by one run."""

    schema_version: Literal["roles.v1"] = OUTPUT_SCHEMA_VERSION
    profile_id: str
    profile_name: str = ""
    generated_at: str
    buckets: dict[str, list[DatedPosting]] = Field(default_factory=dict)
    archive: dict[str, list[DatedPosting]] = Field(default_factory=dict)
    meta: OutputMeta = Field(default_factory=OutputMeta)
