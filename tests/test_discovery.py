from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import httpx

from collectors.http_client import HttpClient
from discovery.probe import DiscoveryResult, candidate_pool, discover_sources, probe_candidate
from discovery.queries import build_official_career_pages, build_search_queries
from schemas.config import FrameworkConfig
from schemas.profile import RoleProfile
from schemas.registry import SourceRegistry

Handler = Callable[[httpx.Request], httpx.Response]


def _config(**overrides: Any) -> FrameworkConfig:
    data: dict[str, Any] = {
        "profile_id": "p",
        "paths": {"output_file": "/tmp/roles.json", "source_registry_file": "/tmp/roles-sources.yml"},
    }
    data.update(overrides)
    return FrameworkConfig.model_validate(data)


def _with_client(handler: Handler, call: Callable[[HttpClient], Any]) -> Any:
    async def run() -> Any:
        async with HttpClient(max_retries=0, transport=httpx.MockTransport(handler)) as client:
            return await call(client)

    return asyncio.run(run())


def _ats_handler(request: httpx.Request) -> httpx.Response:
    host = request.url.host
    if host == "api.smartrecruiters.com" and "/companies/acme/" in request.url.path:
        return httpx.Response(200, json={"content": [{"id": "1"}]}, request=request)
    if host == "acme.teamtailor.com":
        return httpx.Response(200, json={"jobs": []}, request=request)
    if host == "acme.jobs.personio.de":
        return httpx.Response(200, text="<workzag-jobs><position><id>1</id></position></workzag-jobs>", request=request)
    if host == "acme.jobs.personio.com":
        return httpx.Response(200, text="<workzag-jobs/>", request=request)
    return httpx.Response(404, request=request)


def test_probe_candidate_records_each_hit() -> None:
    result = _with_client(_ats_handler, lambda client: probe_candidate("acme", client))

    assert result.slug == "acme"
    assert result.smartrecruiters
    assert not result.teamtailor
    assert not result.recruitee
    assert not result.ashby
    assert result.personio_feeds == ["https://acme.jobs.personio.de/xml"]
    assert result.any_hit


def test_candidate_pool_skips_known_slugs() -> None:
    registry = SourceRegistry.model_validate(
        {
            "explicit": {"company_names": ["Acme"]},
            "discovered": {"ashby_organizations": ["globex"]},
        }
    )
    observed = ["ACME", "Globex", "Initech Ltd", "initech ltd", "", "Umbrella & Co"]

    assert candidate_pool(observed, registry, cap=10) == ["initech-ltd", "umbrella-and-co"]
    assert candidate_pool(observed, registry, cap=1) == ["initech-ltd"]


def test_discovery_disabled_makes_no_requests() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    registry = SourceRegistry()
    off_in_config = _config(discovery={"enabled": False})
    off_in_registry = SourceRegistry.model_validate({"meta": {"discovery_enabled": False}})

    for config, reg in ((off_in_config, registry), (_config(), off_in_registry)):
        result = _with_client(handler, lambda client: discover_sources(config, reg, ["Acme"], client))
        assert result == DiscoveryResult()


def test_discover_sources_collects_hits_and_generated_entries() -> None:
    result = _with_client(
        _ats_handler,
        lambda client: discover_sources(
            _config(),
            SourceRegistry(),
            ["Acme", "Nobody"],
            client,
            search_queries=["data engineer berlin jobs"],
            career_pages=["https://acme.com/careers"],
        ),
    )

    assert result.candidates_probed == 2
    assert result.company_names == ["acme"]
    assert result.smartrecruiters_companies == ["acme"]
    assert result.personio_xml_feeds == ["https://acme.jobs.personio.de/xml"]
    assert result.get("search_queries") == ["data engineer berlin jobs"]
    assert result.get("official_career_pages") == ["https://acme.com/careers"]


def test_build_search_queries() -> None:
    profile = RoleProfile.model_validate(
        {
            "id": "p",
            "locations": {"countries": ["Germany"], "cities": ["Munich"], "priority_cities": ["Berlin"]},
            "buckets": [
                {"id": "a", "include_title_keywords": ["data engineer"]},
                {"id": "b", "include_title_keywords": ["data engineer"], "include_text_keywords": ["dbt"]},
            ],
        }
    )
    queries = build_search_queries(profile, ["Acme"], max_queries=50)

    assert queries == [
        "data engineer Germany jobs",
        "data engineer Berlin jobs",
        "dbt Germany jobs",
        "dbt Berlin jobs",
        "Acme data engineer jobs",
        "Acme dbt jobs",
    ]
    assert build_search_queries(profile, ["Acme"], max_queries=0) == ["data engineer Germany jobs"]


def test_build_search_queries_defaults_countries() -> None:
    profile = RoleProfile.model_validate({"id": "p", "buckets": [{"id": "a", "include_title_keywords": ["sre"]}]})
    assert build_search_queries(profile, [], max_queries=10) == ["sre Germany jobs", "sre India jobs"]


def test_build_official_career_pages() -> None:
    pages = build_official_career_pages(["Acme Corp", "", "acme corp"], max_pages=3)
    assert pages == [
        "https://acme-corp.com/careers",
        "https://careers.acme-corp.com",
        "https://jobs.acme-corp.com",
    ]
    assert len(build_official_career_pages(["a", "b"], max_pages=100)) == 10
