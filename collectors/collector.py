"""Fetch orchestration: run planned tasks concurrently under per-provider limits."""

from __future__ import annotations

import asyncio
import time
from collections import Counter
from dataclasses import dataclass, field

import structlog

from collectors.adapters import get_adapter
from collectors.base import FetchTask, SourceAdapter
from collectors.http_client import HttpClient
from core import verbose
from core.config import Settings
from schemas.posting import Posting

logger = structlog.get_logger(__name__)

# Grace period for abandoned tasks to acknowledge cancellation
_CANCEL_GRACE_SECONDS = 1.0


@dataclass
class FetchOutcome:
    """Everything the fetch phase produced, including how complete it was."""

    postings: list[Posting] = field(default_factory=list)
    provider_counts: dict[str, int] = field(default_factory=dict)
    tasks_planned: int = 0
    tasks_completed: int = 0
    tasks_abandoned: int = 0
    timed_out: bool = False
    duration_ms: int = 0


def dedupe_postings(postings: list[Posting]) -> list[Posting]:
    """Drop invalid postings, then keep the first of each (source, company, title, location, url)."""
    seen: set[str] = set()
    out: list[Posting] = []
    for posting in postings:
        if not posting.is_valid:
            continue
        key = posting.source_identity
        if key in seen:
            continue
        seen.add(key)
        out.append(posting)
    return out


async def _run_task(
    task: FetchTask,
    adapter: SourceAdapter,
    limit: asyncio.Semaphore,
    client: HttpClient,
) -> list[Posting]:
    async with limit:
        verbose.detail(f"fetch {task.label}")
        return await adapter.collect(task, client)


async def fetch_all(
    tasks: list[FetchTask],
    client: HttpClient,
    settings: Settings,
    max_concurrency: int,
    max_runtime: float,
) -> FetchOutcome:
    """Run every task and merge the results.

    Each provider gets its own concurrency ceiling. When ``max_runtime``
    seconds pass, unfinished tasks are abandoned and the postings gathered
    so far are returned.
    """
    start = time.monotonic()
    adapters: dict[str, SourceAdapter] = {}
    limits: dict[str, asyncio.Semaphore] = {}
    running: list[tuple[FetchTask, asyncio.Task[list[Posting]]]] = []

    for task in tasks:
        if task.provider not in adapters:
            adapter = get_adapter(task.provider, settings)
            if adapter is None:
                logger.warning("unknown provider", provider=task.provider)
                continue
            adapters[task.provider] = adapter
            limits[task.provider] = asyncio.Semaphore(adapter.concurrency_limit(max_concurrency))
        running.append(
            (
                task,
                asyncio.create_task(
                    _run_task(task, adapters[task.provider], limits[task.provider], client)
                ),
            )
        )

    outcome = FetchOutcome(tasks_planned=len(tasks))
    if not running:
        return outcome

    _, pending = await asyncio.wait([t for _, t in running], timeout=max_runtime)
    if pending:
        outcome.timed_out = True
        outcome.tasks_abandoned = len(pending)
        logger.warning(
            "fetch budget exhausted, using partial results",
            budget_s=max_runtime,
            abandoned=len(pending),
        )
        for t in pending:
            t.cancel()
        await asyncio.wait(pending, timeout=_CANCEL_GRACE_SECONDS)

    collected: list[Posting] = []
    counts: Counter[str] = Counter()
    # Plan order, so "first occurrence wins" does not depend on completion order
    for task, t in running:
        if not t.done() or t.cancelled():
            continue
        exc = t.exception()
        if exc is not None:
            logger.warning("task crashed", task=task.label, error=str(exc))
            continue
        batch = t.result()
        outcome.tasks_completed += 1
        counts[task.provider] += len(batch)
        collected.extend(batch)

    outcome.postings = dedupe_postings(collected)
    outcome.provider_counts = dict(counts)
    outcome.duration_ms = int((time.monotonic() - start) * 1000)

    logger.info(
        "fetch complete",
        postings=len(outcome.postings),
        raw=len(collected),
        completed=outcome.tasks_completed,
        abandoned=outcome.tasks_abandoned,
        duration_ms=outcome.duration_ms,
        **{f"n_{k}": v for k, v in sorted(counts.items())},
    )
    return outcome
