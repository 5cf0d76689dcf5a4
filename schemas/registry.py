"""Source registry schema: operator-curated and auto-discovered sources."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import Field, field_validator

from .base import BaseSchema

REGISTRY_CATEGORIES = (
    "company_names",
    "personio_xml_feeds",
    "smartrecruiters_companies",
    "teamtailor_companies",
    "recruitee_companies",
    "ashby_organizations",
    "stepstone_feeds",
    "official_career_pages",
    "search_queries",
)

# Categories whose entries are company slugs on some provider.
SLUG_CATEGORIES = (
    "company_names",
    "smartrecruiters_companies",
    "teamtailor_companies",
    "recruitee_companies",
    "ashby_organizations",
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class RegistrySources(BaseSchema):
    """One list of entries per source category."""

    company_names: list[str] = Field(default_factory=list)
    personio_xml_feeds: list[str] = Field(default_factory=list)
    smartrecruiters_companies: list[str] = Field(default_factory=list)
    teamtailor_companies: list[str] = Field(default_factory=list)
    recruitee_companies: list[str] = Field(default_factory=list)
    ashby_organizations: list[str] = Field(default_factory=list)
    stepstone_feeds: list[str] = Field(default_factory=list)
    official_career_pages: list[str] = Field(default_factory=list)
    search_queries: list[str] = Field(default_factory=list)

    @field_validator(*REGISTRY_CATEGORIES, mode="before")
    @classmethod
    def _clean_list(cls, v: object) -> list[str]:
        if not isinstance(v, list):
            return []
        return [str(item).strip() for item in v if item is not None and str(item).strip()]

    def get(self, category: str) -> list[str]:
        return list(getattr(self, category))


class RegistryMeta(BaseSchema):
    discovery_enabled: bool = True
    max_probe_candidates: int = 80

    @field_validator("discovery_enabled", mode="before")
    @classmethod
    def _bool_or_default(cls, v: object) -> bool:
        return v if isinstance(v, bool) else True

    @field_validator("max_probe_candidates", mode="before")
    @classmethod
    def _int_or_default(cls, v: object) -> int:
        if isinstance(v, bool) or not isinstance(v, int | float):
            return 80
        return int(v)


class SourceRegistry(BaseSchema):
    """Persisted catalog of crawlable companies and feeds."""

    generated_at: str = Field(default_factory=_now_iso)
    explicit: RegistrySources = Field(default_factory=RegistrySources)
    discovered: RegistrySources = Field(default_factory=RegistrySources)
    meta: RegistryMeta = Field(default_factory=RegistryMeta)

    @field_validator("explicit", "discovered", "meta", mode="before")
    @classmethod
    def _default_section(cls, v: object) -> object:
        return v if isinstance(v, dict | BaseSchema) else {}

    @field_validator("generated_at", mode="before")
    @classmethod
    def _default_generated_at(cls, v: object) -> str:
        return str(v) if v else _now_iso()

    def known(self, category: str) -> list[str]:
        """Explicit followed by discovered entries for one category."""
        return [*self.explicit.get(category), *self.discovered.get(category)]
