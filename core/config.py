"""Environment settings, resolved once at the top of a run."""

from __future__ import annotations

import re
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Seed-list variables that may extend the configured sources.
ENV_SOURCE_FIELDS = (
    "personio_xml_feeds",
    "smartrecruiters_companies",
    "teamtailor_companies",
    "recruitee_companies",
    "ashby_organizations",
    "stepstone_feeds",
    "official_career_pages",
    "search_queries",
)


def parse_env_list(raw: str | None) -> list[str]:
    """Split a comma, pipe or newline separated value into trimmed items."""
    return [item.strip() for item in re.split(r"[\n,|]", raw or "") if item.strip()]


class Settings(BaseSettings):
    """Application settings from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Provider credentials
    serpapi_api_key: str = ""
    adzuna_app_id: str = ""
    adzuna_app_key: str = ""
    jooble_api_key: str = ""

    # Extra seed sources
    personio_xml_feeds: str = ""
    smartrecruiters_companies: str = ""
    teamtailor_companies: str = ""
    recruitee_companies: str = ""
    ashby_organizations: str = ""
    stepstone_feeds: str = ""
    official_career_pages: str = ""
    search_queries: str = ""

    # Default file locations
    config_path: str = "roles-kit/roles.config.yml"
    profiles_dir: str = "roles-kit/profiles"
    runtime_providers_path: str = "roles-kit/providers.runtime.yml"

    # Runtime
    verbose: int = 0
    log_level: str = "INFO"

    @field_validator("verbose", mode="before")
    @classmethod
    def _coerce_verbose(cls, v: Any) -> int:
        if isinstance(v, bool):
            return 2 if v else 0
        if isinstance(v, str):
            low = v.strip().lower()
            try:
                return int(low)
            except ValueError:
                pass
            if low in ("true", "yes"):
                return 2
            return 0
        return int(v)

    @field_validator(
        "serpapi_api_key", "adzuna_app_id", "adzuna_app_key", "jooble_api_key", mode="after"
    )
    @classmethod
    def _strip_key(cls, v: str) -> str:
        return v.strip()

    @property
    def has_serpapi(self) -> bool:
        """Check if a SerpAPI key is configured."""
        return bool(self.serpapi_api_key)

    @property
    def has_adzuna(self) -> bool:
        """Check if the Adzuna id/key pair is configured."""
        return bool(self.adzuna_app_id and self.adzuna_app_key)

    @property
    def has_jooble(self) -> bool:
        """Check if a Jooble key is configured."""
        return bool(self.jooble_api_key)

    def env_sources(self) -> dict[str, list[str]]:
        """Seed lists supplied through the environment, keyed by source category."""
        return {name: parse_env_list(getattr(self, name)) for name in ENV_SOURCE_FIELDS}
