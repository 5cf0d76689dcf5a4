"""Source adapter registry, keyed by provider type."""

from __future__ import annotations

from collectors.adapters.ats import (
    AshbyAdapter,
    GreenhouseAdapter,
    LeverAdapter,
    RecruiteeAdapter,
    SmartRecruitersAdapter,
    TeamtailorAdapter,
)
from collectors.adapters.boards import (
    AdzunaAdapter,
    ArbeitnowAdapter,
    JobicyAdapter,
    JoobleAdapter,
    RemotiveAdapter,
)
from collectors.adapters.career_pages import CareerPageAdapter
from collectors.adapters.feeds import PersonioXmlAdapter, StepstoneFeedAdapter
from collectors.adapters.search import (
    SerpApiGoogleJobsAdapter,
    SerpApiJobBoardsAdapter,
    SerpApiOfficialSitesAdapter,
)
from collectors.base import SourceAdapter
from core.config import Settings

ADAPTER_REGISTRY: dict[str, type[SourceAdapter]] = {
    "greenhouse": GreenhouseAdapter,
    "lever": LeverAdapter,
    "personio": PersonioXmlAdapter,
    "smartrecruiters": SmartRecruitersAdapter,
    "teamtailor": TeamtailorAdapter,
    "recruitee": RecruiteeAdapter,
    "ashby": AshbyAdapter,
    "stepstone": StepstoneFeedAdapter,
    "arbeitnow": ArbeitnowAdapter,
    "remotive": RemotiveAdapter,
    "jobicy": JobicyAdapter,
    "adzuna": AdzunaAdapter,
    "jooble": JoobleAdapter,
    "serpapi_google_jobs": SerpApiGoogleJobsAdapter,
    "serpapi_job_boards": SerpApiJobBoardsAdapter,
    "serpapi_official_sites": SerpApiOfficialSitesAdapter,
    "official_career_pages": CareerPageAdapter,
}


def get_adapter(provider: str, settings: Settings | None = None) -> SourceAdapter | None:
    """Get an adapter instance for the given provider type."""
    adapter_cls = ADAPTER_REGISTRY.get(provider)
    if adapter_cls is None:
        return None
    return adapter_cls(settings)


__all__ = [
    "ADAPTER_REGISTRY",
    "SourceAdapter",
    "get_adapter",
]
