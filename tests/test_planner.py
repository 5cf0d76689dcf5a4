from __future__ import annotations

from collections import Counter
from collections.abc import Callable

from collectors.planner import MAX_QUERIES_PER_COUNTRY, plan_fetch_tasks
from core.config import Settings
from schemas.config import Knobs, RuntimeSources


def _providers(tasks: list) -> Counter[str]:
    return Counter(t.provider for t in tasks)


def test_list_providers_get_one_task_per_entry(make_settings: Callable[..., Settings]) -> None:
    sources = RuntimeSources(
        greenhouse_companies=["acme", "globex"],
        lever_companies=["initech"],
        personio_xml_feeds=["https://acme.jobs.personio.de/xml"],
        ashby_organizations=["umbrella"],
        arbeitnow_enabled=True,
    )
    tasks = plan_fetch_tasks(sources, make_settings(), Knobs())
    assert _providers(tasks) == Counter(
        {"greenhouse": 2, "lever": 1, "personio": 1, "ashby": 1, "arbeitnow": 1}
    )


def test_keyed_providers_skipped_without_credentials(make_settings: Callable[..., Settings]) -> None:
    sources = RuntimeSources(
        adzuna_enabled=True,
        jooble_enabled=True,
        serpapi_google_jobs_enabled=True,
        search_queries=["data engineer"],
    )
    assert plan_fetch_tasks(sources, make_settings(), Knobs()) == []


def test_country_providers_fan_out_over_capped_queries(make_settings: Callable[..., Settings]) -> None:
    queries = [f"query {i}" for i in range(6)]
    sources = RuntimeSources(
        adzuna_enabled=True,
        adzuna_countries=["de", "fr"],
        search_queries=queries,
    )
    settings = make_settings(adzuna_app_id="id", adzuna_app_key="key")
    tasks = plan_fetch_tasks(sources, settings, Knobs())

    assert len(tasks) == 2 * MAX_QUERIES_PER_COUNTRY
    assert {t.country for t in tasks} == {"de", "fr"}
    assert {t.target for t in tasks} == set(queries[:MAX_QUERIES_PER_COUNTRY])


def test_serpapi_tasks_respect_query_cap(make_settings: Callable[..., Settings]) -> None:
    sources = RuntimeSources(
        serpapi_google_jobs_enabled=True,
        serpapi_job_board_search_enabled=True,
        search_queries=[f"q{i}" for i in range(10)],
        serpapi_gl="fr",
    )
    tasks = plan_fetch_tasks(sources, make_settings(serpapi_api_key="k"), Knobs(max_serpapi_queries_per_run=3))
    counts = _providers(tasks)
    assert counts["serpapi_google_jobs"] == 3
    assert counts["serpapi_job_boards"] == 3
    assert all(t.params["gl"] == "fr" for t in tasks)
    assert any("site:linkedin.com/jobs" in t.target for t in tasks if t.provider == "serpapi_job_boards")


def test_official_career_pages_follow_their_flag(make_settings: Callable[..., Settings]) -> None:
    pages = ["https://acme.example/careers"]
    enabled = RuntimeSources(official_career_pages=pages, official_career_pages_enabled=True)
    disabled = RuntimeSources(official_career_pages=pages, official_career_pages_enabled=False)

    assert [t.target for t in plan_fetch_tasks(enabled, make_settings(), Knobs())] == pages
    assert plan_fetch_tasks(disabled, make_settings(), Knobs()) == []
