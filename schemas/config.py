"""Configuration file schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from .base import BaseSchema

CONFIG_SCHEMA_VERSION = "roles-radar.v0.1"
RUNTIME_SCHEMA_VERSION = "roles-radar-runtime.v0.1"

DEFAULT_COUNTRIES = ["de", "fr", "nl", "at", "be", "in"]


# --- Framework config ---


class PathsConfig(BaseSchema):
    """Output and registry locations, absolute after loading."""

    output_file: str
    source_registry_file: str


class Knobs(BaseSchema):
    """Numeric run knobs."""

    stale_after_days: int = Field(default=3, ge=0)
    inactive_after_days: int = Field(default=7, ge=0)
    inactive_action: Literal["archive", "hard_delete"] = "archive"
    max_runtime_ms: int = Field(default=120_000, ge=1)
    request_timeout_ms: int = Field(default=15_000, ge=1)
    request_delay_ms: int = Field(default=250, ge=0)
    max_concurrency: int = Field(default=8, ge=1)
    max_discovery_adds_per_source: int = Field(default=20, ge=0)
    max_probe_candidates: int = Field(default=40, ge=0)
    max_serpapi_queries_per_run: int = Field(default=24, ge=0)

    @property
    def request_timeout(self) -> float:
        return self.request_timeout_ms / 1000

    @property
    def request_delay(self) -> float:
        return self.request_delay_ms / 1000

    @property
    def max_runtime(self) -> float:
        return self.max_runtime_ms / 1000


class DiscoveryConfig(BaseSchema):
    enabled: bool = True


class SourcesConfig(BaseSchema):
    """Configured sources and per-provider enable flags."""

    greenhouse_companies: list[str] = Field(default_factory=list)
    lever_companies: list[str] = Field(default_factory=list)
    personio_xml_feeds: list[str] = Field(default_factory=list)
    smartrecruiters_companies: list[str] = Field(default_factory=list)
    teamtailor_companies: list[str] = Field(default_factory=list)
    recruitee_companies: list[str] = Field(default_factory=list)
    ashby_organizations: list[str] = Field(default_factory=list)
    stepstone_feeds: list[str] = Field(default_factory=list)
    arbeitnow_enabled: bool = True
    remotive_enabled: bool = True
    jobicy_enabled: bool = True
    adzuna_enabled: bool = True
    jooble_enabled: bool = True
    serpapi_google_jobs_enabled: bool = True
    serpapi_job_board_search_enabled: bool = True
    serpapi_official_sites_search_enabled: bool = True
    official_career_pages_enabled: bool = True


class FrameworkConfig(BaseSchema):
    """Schema for roles.config.yml, after migration."""

    schema_version: Literal["roles-radar.v0.1"] = CONFIG_SCHEMA_VERSION
    profile_id: str
    paths: PathsConfig
    knobs: Knobs = Field(default_factory=Knobs)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    sources: SourcesConfig = Field(default_factory=SourcesConfig)


# --- Runtime provider overlay ---


class ProviderDefaults(BaseSchema):
    """Regional defaults for search and country-keyed providers."""

    serpapi_gl: str = "de"
    serpapi_hl: str = "en"
    adzuna_countries: list[str] = Field(default_factory=lambda: list(DEFAULT_COUNTRIES))
    jooble_countries: list[str] = Field(default_factory=lambda: list(DEFAULT_COUNTRIES))


class ExtraSources(BaseSchema):
    personio_xml_feeds: list[str] = Field(default_factory=list)
    smartrecruiters_companies: list[str] = Field(default_factory=list)
    teamtailor_companies: list[str] = Field(default_factory=list)
    recruitee_companies: list[str] = Field(default_factory=list)
    ashby_organizations: list[str] = Field(default_factory=list)
    stepstone_feeds: list[str] = Field(default_factory=list)
    official_career_pages: list[str] = Field(default_factory=list)
    search_queries: list[str] = Field(default_factory=list)


class RuntimeProviderConfig(BaseSchema):
    """Schema for providers.runtime.yml."""

    schema_version: Literal["roles-radar-runtime.v0.1"]
    providers: ProviderDefaults = Field(default_factory=ProviderDefaults)
    extra_sources: ExtraSources = Field(default_factory=ExtraSources)


# --- Resolved sources ---


class RuntimeSources(BaseSchema):
    """Everything the fetch planner needs, merged from all inputs."""

    greenhouse_companies: list[str] = Field(default_factory=list)
    lever_companies: list[str] = Field(default_factory=list)
    personio_xml_feeds: list[str] = Field(default_factory=list)
    smartrecruiters_companies: list[str] = Field(default_factory=list)
    teamtailor_companies: list[str] = Field(default_factory=list)
    recruitee_companies: list[str] = Field(default_factory=list)
    ashby_organizations: list[str] = Field(default_factory=list)
    stepstone_feeds: list[str] = Field(default_factory=list)
    official_career_pages: list[str] = Field(default_factory=list)
    search_queries: list[str] = Field(default_factory=list)
    arbeitnow_enabled: bool = False
    remotive_enabled: bool = False
    jobicy_enabled: bool = False
    adzuna_enabled: bool = False
    jooble_enabled: bool = False
    serpapi_google_jobs_enabled: bool = False
    serpapi_job_board_search_enabled: bool = False
    serpapi_official_sites_search_enabled: bool = False
    official_career_pages_enabled: bool = False
    serpapi_gl: str = "de"
    serpapi_hl: str = "en"
    adzuna_countries: list[str] = Field(default_factory=list)
    jooble_countries: list[str] = Field(default_factory=list)

    @property
    def uses_serpapi(self) -> bool:
        return (
            self.serpapi_google_jobs_enabled
            or self.serpapi_job_board_search_enabled
            or self.serpapi_official_sites_search_enabled
        )
