from __future__ import annotations

import asyncio
from collections.abc import Callable

import httpx

from collectors.base import FetchTask
from collectors.collector import FetchOutcome, dedupe_postings, fetch_all
from collectors.http_client import HttpClient
from core.config import Settings
from schemas.posting import Posting


def _greenhouse_jobs(company: str, count: int) -> dict:
    return {
        "jobs": [
            {
                "title": f"Engineer {i}",
                "absolute_url": f"https://boards.greenhouse.io/{company}/jobs/{i}",
                "location": {"name": "Berlin"},
            }
            for i in range(count)
        ]
    }


def _run(tasks: list[FetchTask], handler, settings: Settings, max_runtime: float = 5.0) -> FetchOutcome:
    async def run() -> FetchOutcome:
        async with HttpClient(max_retries=0, transport=httpx.MockTransport(handler)) as client:
            return await fetch_all(tasks, client, settings, max_concurrency=4, max_runtime=max_runtime)

    return asyncio.run(run())


def test_one_failing_provider_does_not_affect_others(make_settings: Callable[..., Settings]) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        if "/boards/broken/" in request.url.path:
            return httpx.Response(502, request=request)
        company = request.url.path.split("/")[3]
        return httpx.Response(200, json=_greenhouse_jobs(company, 2), request=request)

    tasks = [
        FetchTask(provider="greenhouse", target="acme"),
        FetchTask(provider="greenhouse", target="broken"),
        FetchTask(provider="greenhouse", target="globex"),
    ]
    outcome = _run(tasks, handler, make_settings())

    assert outcome.tasks_planned == 3
    assert outcome.tasks_completed == 3
    assert not outcome.timed_out
    assert [p.company for p in outcome.postings] == ["acme", "acme", "globex", "globex"]
    assert outcome.provider_counts == {"greenhouse": 4}


def test_budget_expiry_returns_partial_results(make_settings: Callable[..., Settings]) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        if "/boards/slow/" in request.url.path:
            await asyncio.sleep(5)
        company = request.url.path.split("/")[3]
        return httpx.Response(200, json=_greenhouse_jobs(company, 1), request=request)

    tasks = [
        FetchTask(provider="greenhouse", target="fast"),
        FetchTask(provider="greenhouse", target="slow"),
    ]
    outcome = _run(tasks, handler, make_settings(), max_runtime=0.3)

    assert outcome.timed_out
    assert outcome.tasks_abandoned == 1
    assert [p.company for p in outcome.postings] == ["fast"]


def test_unknown_provider_is_ignored(make_settings: Callable[..., Settings]) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    outcome = _run([FetchTask(provider="nope", target="x")], handler, make_settings())
    assert outcome.postings == []
    assert outcome.tasks_planned == 1


def test_dedupe_postings_drops_invalid_and_repeats(make_posting: Callable[..., Posting]) -> None:
    first = make_posting()
    postings = [
        first,
        make_posting(title="  data engineer "),
        make_posting(url=""),
        make_posting(source="lever"),
    ]
    deduped = dedupe_postings(postings)
    assert deduped == [first, postings[3]]
    assert dedupe_postings(deduped + deduped) == deduped
