"""Job posting records, from raw adapter output to the persisted dated form."""

from __future__ import annotations

from pydantic import Field, field_validator

from core.ids import dedupe_key

from .base import RecordSchema


class Posting(RecordSchema):
    """One normalized job listing from any provider."""

    source: str = Field(..., description="Provider tag, e.g. 'greenhouse' or 'serpapi-job-boards:indeed'")
    source_note: str = Field("", description="Free-text provenance, e.g. the originating query")
    company: str = ""
    title: str = ""
    location: str = ""
    url: str = ""
    updated_at: str | None = Field(None, description="Provider-supplied timestamp, as given")
    description: str = Field("", description="HTML-stripped plain text")
    job_types: list[str] = Field(default_factory=list)
    remote: bool = False

    @field_validator("source_note", "company", "title", "location", "url", "description", mode="before")
    @classmethod
    def _none_to_empty(cls, v: object) -> object:
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)

    @field_validator("job_types", mode="before")
    @classmethod
    def _coerce_job_types(cls, v: object) -> object:
        if v is None:
            return []
        if isinstance(v, str):
            return [v] if v else []
        return [str(item) for item in v] if isinstance(v, (list, tuple)) else v

    @field_validator("remote", mode="before")
    @classmethod
    def _coerce_remote(cls, v: object) -> object:
        return bool(v)

    @field_validator("updated_at", mode="before")
    @classmethod
    def _stringify_timestamp(cls, v: object) -> object:
        if v is None or v == "":
            return None
        return str(v)

    @property
    def is_valid(self) -> bool:
        """Title and url are both present."""
        return bool(self.title and self.url)

    @property
    def identity(self) -> str:
        """Normalized (company, title, location, url) key."""
        return dedupe_key(self.company, self.title, self.location, self.url)

    @property
    def source_identity(self) -> str:
        """Identity including the provider tag, used when merging fetch results."""
        return dedupe_key(self.source, self.company, self.title, self.location, self.url)


class ScoredPosting(Posting):
    """A posting accepted by one bucket, with its relevance score."""

    score: int = 0
    skill_hits: int = 0
    bucket_id: str = ""


class DatedPosting(ScoredPosting):
    """Persisted form of a scored posting."""

    fetched_at: str = Field("", description="ISO timestamp of the run that first produced it")
    pulled_at: str = Field("", description="ISO timestamp of the latest run that observed it")
    stale_days: int = Field(0, ge=0)
    is_stale: bool = False
