"""Source planning: translate resolved sources into fetch tasks."""

from __future__ import annotations

import structlog

from collectors.adapters.search import board_query, official_sites_query
from collectors.base import FetchTask
from core.config import Settings
from core.ids import normalize_text, unique
from schemas.config import DEFAULT_COUNTRIES, Knobs, RuntimeSources

logger = structlog.get_logger(__name__)

# Country-keyed aggregators search at most this many queries per country.
MAX_QUERIES_PER_COUNTRY = 4

# Per-company / per-feed providers: (registry key, RuntimeSources list field)
_LIST_PROVIDERS = (
    ("greenhouse", "greenhouse_companies"),
    ("lever", "lever_companies"),
    ("personio", "personio_xml_feeds"),
    ("smartrecruiters", "smartrecruiters_companies"),
    ("teamtailor", "teamtailor_companies"),
    ("recruitee", "recruitee_companies"),
    ("ashby", "ashby_organizations"),
    ("stepstone", "stepstone_feeds"),
)


def _country_tasks(
    provider: str, countries: list[str], queries: list[str], default_query: str
) -> list[FetchTask]:
    active = queries or [default_query]
    return [
        FetchTask(provider=provider, target=query, country=country)
        for country in unique(countries or DEFAULT_COUNTRIES)
        for query in active[:MAX_QUERIES_PER_COUNTRY]
    ]


def plan_fetch_tasks(sources: RuntimeSources, settings: Settings, knobs: Knobs) -> list[FetchTask]:
    """Plan one task per request-sized unit of work.

    Keyed providers without credentials are left out entirely.
    """
    tasks: list[FetchTask] = []

    for provider, field in _LIST_PROVIDERS:
        tasks.extend(FetchTask(provider=provider, target=t) for t in getattr(sources, field))

    for provider in ("arbeitnow", "remotive", "jobicy"):
        if getattr(sources, f"{provider}_enabled"):
            tasks.append(FetchTask(provider=provider, target=provider))

    queries = unique(normalize_text(q) for q in sources.search_queries)

    if sources.adzuna_enabled:
        if settings.has_adzuna:
            tasks.extend(
                _country_tasks("adzuna", sources.adzuna_countries, queries, "software engineer germany")
            )
        else:
            logger.info("provider skipped", provider="adzuna", reason="ADZUNA_APP_ID/ADZUNA_APP_KEY not set")

    if sources.jooble_enabled:
        if settings.has_jooble:
            tasks.extend(_country_tasks("jooble", sources.jooble_countries, queries, "software engineer"))
        else:
            logger.info("provider skipped", provider="jooble", reason="JOOBLE_API_KEY not set")

    if sources.uses_serpapi and not settings.has_serpapi:
        logger.info("provider skipped", provider="serpapi", reason="SERPAPI_API_KEY not set")
    elif settings.has_serpapi:
        cap = knobs.max_serpapi_queries_per_run
        params = {"gl": sources.serpapi_gl, "hl": sources.serpapi_hl}
        if sources.serpapi_google_jobs_enabled:
            tasks.extend(
                FetchTask(provider="serpapi_google_jobs", target=q, params=params)
                for q in (queries or ["software engineer germany"])[:cap]
            )
        if sources.serpapi_job_board_search_enabled:
            tasks.extend(
                FetchTask(provider="serpapi_job_boards", target=board_query(q), params=params)
                for q in queries[:cap]
            )
        if sources.serpapi_official_sites_search_enabled:
            tasks.extend(
                FetchTask(provider="serpapi_official_sites", target=official_sites_query(q), params=params)
                for q in queries[:cap]
            )

    if sources.official_career_pages_enabled:
        tasks.extend(
            FetchTask(provider="official_career_pages", target=page)
            for page in sources.official_career_pages
        )

    return tasks
