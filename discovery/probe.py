"""Discovery probe engine.

Companies observed in a run's postings are slugified and checked against
the ATS endpoint shapes the collectors already know how to read. A slug
that answers with at least one posting on any of them is worth adding to
the source registry.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from collectors.adapters.ats import ashby_url, recruitee_url, smartrecruiters_url, teamtailor_url
from collectors.adapters.feeds import personio_feed_urls
from collectors.http_client import HttpClient
from core.ids import slugify, unique
from schemas.config import FrameworkConfig
from schemas.registry import SLUG_CATEGORIES, SourceRegistry

logger = structlog.get_logger(__name__)

_POSITION_TAG = re.compile(r"<position\b", re.IGNORECASE)


def _non_empty_list(value: Any) -> bool:
    return isinstance(value, list) and len(value) > 0


def _has_list_or_jobs(data: Any) -> bool:
    if _non_empty_list(data):
        return True
    return isinstance(data, dict) and _non_empty_list(data.get("jobs"))


@dataclass
class ProbeResult:
    """Which ATS shapes answered with postings for one slug."""

    slug: str
    smartrecruiters: bool = False
    teamtailor: bool = False
    recruitee: bool = False
    ashby: bool = False
    personio_de: bool = False
    personio_com: bool = False

    @property
    def any_hit(self) -> bool:
        return any(
            (
                self.smartrecruiters,
                self.teamtailor,
                self.recruitee,
                self.ashby,
                self.personio_de,
                self.personio_com,
            )
        )

    @property
    def personio_feeds(self) -> list[str]:
        de_url, com_url = personio_feed_urls(self.slug)
        return [url for url, hit in ((de_url, self.personio_de), (com_url, self.personio_com)) if hit]


@dataclass
class DiscoveryResult:
    """New entries offered to the registry, one list per category."""

    company_names: list[str] = field(default_factory=list)
    smartrecruiters_companies: list[str] = field(default_factory=list)
    teamtailor_companies: list[str] = field(default_factory=list)
    recruitee_companies: list[str] = field(default_factory=list)
    ashby_organizations: list[str] = field(default_factory=list)
    personio_xml_feeds: list[str] = field(default_factory=list)
    official_career_pages: list[str] = field(default_factory=list)
    search_queries: list[str] = field(default_factory=list)
    candidates_probed: int = 0

    def get(self, category: str) -> list[str]:
        return list(getattr(self, category, []))

    @classmethod
    def from_probes(
        cls,
        results: list[ProbeResult],
        career_pages: list[str],
        search_queries: list[str],
    ) -> DiscoveryResult:
        return cls(
            company_names=[r.slug for r in results if r.any_hit],
            smartrecruiters_companies=[r.slug for r in results if r.smartrecruiters],
            teamtailor_companies=[r.slug for r in results if r.teamtailor],
            recruitee_companies=[r.slug for r in results if r.recruitee],
            ashby_organizations=[r.slug for r in results if r.ashby],
            personio_xml_feeds=[url for r in results for url in r.personio_feeds],
            official_career_pages=list(career_pages),
            search_queries=list(search_queries),
            candidates_probed=len(results),
        )


def probe_cap(config: FrameworkConfig, registry: SourceRegistry) -> int:
    return max(1, min(registry.meta.max_probe_candidates, config.knobs.max_probe_candidates))


def candidate_pool(observed_companies: list[str], registry: SourceRegistry, cap: int) -> list[str]:
    """Slugs of observed companies not yet registered under any slug category."""
    known = {slugify(entry) for category in SLUG_CATEGORIES for entry in registry.known(category)}
    slugs = (slugify(company) for company in observed_companies)
    return unique(s for s in slugs if s and s not in known)[:cap]


async def _probe(name: str, slug: str, check: Callable[[], Awaitable[bool]]) -> bool:
    try:
        return await check()
    except Exception as e:
        logger.debug("probe failed", probe=name, slug=slug, error=f"{type(e).__name__}: {e}")
        return False


async def probe_candidate(slug: str, client: HttpClient) -> ProbeResult:
    """Run every probe shape for one slug concurrently."""

    async def smartrecruiters() -> bool:
        data = await client.get_json(smartrecruiters_url(slug, limit=1))
        return isinstance(data, dict) and _non_empty_list(data.get("content"))

    async def teamtailor() -> bool:
        return _has_list_or_jobs(await client.get_json(teamtailor_url(slug)))

    async def recruitee() -> bool:
        data = await client.get_json(recruitee_url(slug))
        return isinstance(data, dict) and _non_empty_list(data.get("offers"))

    async def ashby() -> bool:
        return _has_list_or_jobs(await client.get_json(ashby_url(slug)))

    async def personio(url: str) -> bool:
        return bool(_POSITION_TAG.search(await client.get_text(url)))

    de_url, com_url = personio_feed_urls(slug)
    hits = await asyncio.gather(
        _probe("smartrecruiters", slug, smartrecruiters),
        _probe("teamtailor", slug, teamtailor),
        _probe("recruitee", slug, recruitee),
        _probe("ashby", slug, ashby),
        _probe("personio-de", slug, lambda: personio(de_url)),
        _probe("personio-com", slug, lambda: personio(com_url)),
    )
    return ProbeResult(slug, *hits)


async def discover_sources(
    config: FrameworkConfig,
    registry: SourceRegistry,
    observed_companies: list[str],
    client: HttpClient,
    search_queries: list[str] | None = None,
    career_pages: list[str] | None = None,
) -> DiscoveryResult:
    """Probe candidate slugs and collect what should be added to the registry.

    Returns an empty result when discovery is switched off in either the
    config or the registry.
    """
    if not config.discovery.enabled or not registry.meta.discovery_enabled:
        logger.info("discovery disabled")
        return DiscoveryResult()

    candidates = candidate_pool(observed_companies, registry, probe_cap(config, registry))
    limit = asyncio.Semaphore(max(1, config.knobs.max_concurrency // 2))

    async def bounded(slug: str) -> ProbeResult:
        async with limit:
            return await probe_candidate(slug, client)

    results = await asyncio.gather(*(bounded(slug) for slug in candidates))
    discovered = DiscoveryResult.from_probes(results, career_pages or [], search_queries or [])

    logger.info(
        "discovery complete",
        candidates=len(candidates),
        companies=len(discovered.company_names),
        personio=len(discovered.personio_xml_feeds),
    )
    return discovered
