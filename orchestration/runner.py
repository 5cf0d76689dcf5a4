"""Pipeline runner: Boot -> Plan -> Fetch -> Score -> Reconcile -> Discover -> Write."""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import httpx
import structlog

from collectors.collector import fetch_all
from collectors.http_client import HttpClient
from collectors.planner import plan_fetch_tasks
from core import verbose
from core.config import Settings
from core.context import RunContext, RunStatus
from core.ids import unique
from discovery.probe import discover_sources
from discovery.queries import build_official_career_pages, build_search_queries
from discovery.registry import accumulate_registry
from lifecycle.reconciler import reconcile
from pipelines.utils import (
    load_config,
    load_profile,
    load_runtime_providers,
    resolve_runtime_sources,
)
from schemas.config import FrameworkConfig, RuntimeSources
from schemas.output import OutputDocument, OutputMeta
from schemas.profile import RoleProfile
from schemas.registry import SourceRegistry
from scoring.engine import score_buckets
from storage.store import FileRunStore

logger = structlog.get_logger(__name__)

# Seed companies for generated queries and guessed career pages.
_SEED_CATEGORIES = (
    "greenhouse_companies",
    "lever_companies",
    "smartrecruiters_companies",
    "teamtailor_companies",
    "recruitee_companies",
    "ashby_organizations",
)


def _end_stage(
    ctx: RunContext,
    name: str,
    items_out: int,
    errors: list[str] | None = None,
    status: str = "completed",
) -> None:
    log = ctx.complete_stage(name, items_out=items_out, errors=errors, status=status)
    if log is not None:
        verbose.stage_end(name, items_out, len(log.errors), log.duration_seconds or 0.0)


def seed_companies(registry: SourceRegistry, sources: RuntimeSources) -> list[str]:
    return unique(
        [
            *registry.known("company_names"),
            *(name for category in _SEED_CATEGORIES for name in getattr(sources, category)),
        ]
    )


def expand_sources(
    sources: RuntimeSources,
    profile: RoleProfile,
    registry: SourceRegistry,
    config: FrameworkConfig,
    settings: Settings,
) -> RuntimeSources:
    """Add generated search queries and guessed career pages when SerpAPI can use them."""
    knobs = config.knobs
    seeds = seed_companies(registry, sources)

    generated_queries: list[str] = []
    generated_pages: list[str] = []
    if settings.has_serpapi and sources.uses_serpapi:
        generated_queries = build_search_queries(profile, seeds, knobs.max_serpapi_queries_per_run)
    if settings.has_serpapi and sources.serpapi_official_sites_search_enabled:
        generated_pages = build_official_career_pages(seeds, knobs.max_probe_candidates)

    return sources.model_copy(
        update={
            "search_queries": unique(
                [*sources.search_queries, *generated_queries]
            )[: knobs.max_serpapi_queries_per_run],
            "official_career_pages": unique(
                [*sources.official_career_pages, *generated_pages]
            )[: knobs.max_probe_candidates],
        }
    )


def source_counts(sources: RuntimeSources, settings: Settings) -> dict[str, int]:
    """How much each provider had to work with this run."""
    serpapi = settings.has_serpapi
    return {
        "greenhouse": len(sources.greenhouse_companies),
        "lever": len(sources.lever_companies),
        "personio_xml_feeds": len(sources.personio_xml_feeds),
        "smartrecruiters_companies": len(sources.smartrecruiters_companies),
        "teamtailor_companies": len(sources.teamtailor_companies),
        "recruitee_companies": len(sources.recruitee_companies),
        "ashby_organizations": len(sources.ashby_organizations),
        "stepstone_feeds": len(sources.stepstone_feeds),
        "arbeitnow": int(sources.arbeitnow_enabled),
        "remotive": int(sources.remotive_enabled),
        "jobicy": int(sources.jobicy_enabled),
        "adzuna": int(sources.adzuna_enabled and settings.has_adzuna),
        "jooble": int(sources.jooble_enabled and settings.has_jooble),
        "serpapi_google_jobs": int(sources.serpapi_google_jobs_enabled and serpapi),
        "serpapi_job_boards": int(sources.serpapi_job_board_search_enabled and serpapi),
        "serpapi_official_sites": int(sources.serpapi_official_sites_search_enabled and serpapi),
        "official_career_pages": len(sources.official_career_pages),
        "search_queries": len(sources.search_queries),
    }


async def run_pipeline_async(
    config_path: str | Path | None = None,
    profiles_dir: str | Path | None = None,
    runtime_path: str | Path | None = None,
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    now: datetime | None = None,
    retry_backoff: float = 0.5,
) -> RunContext:
    """Run the full pipeline once and persist its output and registry.

    Args:
        config_path: Framework config file (defaults to settings.config_path)
        profiles_dir: Directory holding role profiles (defaults to settings.profiles_dir)
        runtime_path: Runtime provider overlay (defaults to settings.runtime_providers_path)
        settings: Optional pre-loaded settings
        transport: Optional httpx transport, used by tests to stub the network
        now: Run timestamp; defaults to the current time
        retry_backoff: Multiplier for exponential backoff between HTTP retries

    Returns:
        RunContext with metrics, stage logs and the written paths

    Raises:
        ConfigValidationError: If the config or profile cannot be loaded
    """
    run_start = time.monotonic()

    # Stage 0: Boot
    settings = settings or Settings()
    verbose.configure(settings.verbose)

    config = load_config(config_path or settings.config_path)
    profile = load_profile(profiles_dir or settings.profiles_dir, config.profile_id)
    store = FileRunStore(config.paths.output_file, config.paths.source_registry_file)
    registry = store.load_registry()
    runtime = load_runtime_providers(runtime_path or settings.runtime_providers_path)
    knobs = config.knobs

    if now is not None and now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    ctx = RunContext.boot(settings, started_at=now)
    run_at = ctx.started_at.isoformat()

    verbose.header(f"Pipeline Run {ctx.run_id}")
    verbose.stage("Boot", "load config, profile, registry and runtime overlay")
    verbose.step(f"Profile: {profile.id} ({profile.display_name or 'unnamed'})")
    verbose.step(f"Active buckets: {', '.join(b.id for b in profile.active_buckets())}")
    verbose.step(f"Runtime overlay: {'loaded' if runtime else 'none'}")

    try:
        # Stage 1: Plan
        ctx.start_stage("plan")
        verbose.stage("Plan", "resolve sources into fetch tasks")
        sources = resolve_runtime_sources(config, registry, runtime, settings)
        sources = expand_sources(sources, profile, registry, config, settings)
        counts = source_counts(sources, settings)
        tasks = plan_fetch_tasks(sources, settings, knobs)
        ctx.metrics.num_fetch_tasks = len(tasks)
        verbose.counts("Sources", counts)
        logger.info(
            "sources resolved",
            profile=profile.id,
            tasks=len(tasks),
            serpapi=settings.has_serpapi,
            **counts,
        )
        _end_stage(ctx, "plan", len(tasks))

        async with HttpClient(
            timeout=knobs.request_timeout,
            request_delay=knobs.request_delay,
            retry_backoff=retry_backoff,
            transport=transport,
        ) as client:
            # Stage 2: Fetch
            ctx.start_stage("fetch", items_in=len(tasks))
            verbose.stage("Fetch", f"{len(tasks)} tasks, budget {knobs.max_runtime:.0f}s")
            outcome = await fetch_all(tasks, client, settings, knobs.max_concurrency, knobs.max_runtime)
            ctx.metrics.num_tasks_completed = outcome.tasks_completed
            ctx.metrics.num_tasks_abandoned = outcome.tasks_abandoned
            ctx.metrics.num_postings_fetched = len(outcome.postings)
            ctx.metrics.fetch_timed_out = outcome.timed_out
            verbose.counts("Postings by provider", outcome.provider_counts)
            if outcome.timed_out:
                _end_stage(ctx, "fetch", len(outcome.postings), ["fetch budget exhausted"], status="partial")
            else:
                _end_stage(ctx, "fetch", len(outcome.postings))

            # Stage 3: Score
            ctx.start_stage("score", items_in=len(outcome.postings))
            verbose.stage("Score", "filter and rank postings per bucket")
            scored = score_buckets(outcome.postings, profile)
            verbose.counts("Accepted by bucket", {k: len(v) for k, v in scored.items()})
            _end_stage(ctx, "score", sum(len(v) for v in scored.values()))

            # Stage 4: Reconcile
            ctx.start_stage("reconcile")
            verbose.stage("Reconcile", "merge with prior output and age postings")
            prior = store.load_output()
            lifecycle = reconcile(profile, scored, prior, ctx.started_at, knobs)
            ctx.metrics.num_postings_kept = sum(len(v) for v in lifecycle.buckets.values())
            ctx.metrics.num_postings_archived = sum(len(v) for v in lifecycle.archive.values())
            verbose.counts("Active by bucket", {k: len(v) for k, v in lifecycle.buckets.items()})
            _end_stage(ctx, "reconcile", ctx.metrics.num_postings_kept)

            # Stage 5: Discover
            ctx.start_stage("discover")
            verbose.stage("Discover", "probe observed companies on known ATS providers")
            observed = unique(p.company for p in outcome.postings)
            discovered = await discover_sources(
                config,
                registry,
                observed,
                client,
                search_queries=sources.search_queries,
                career_pages=sources.official_career_pages,
            )
            updated_registry = accumulate_registry(registry, discovered, config, run_at)
            ctx.metrics.num_probe_candidates = discovered.candidates_probed
            ctx.metrics.num_sources_discovered = len(discovered.company_names)
            _end_stage(ctx, "discover", len(discovered.company_names))

        # Stage 6: Write
        ctx.start_stage("write")
        verbose.stage("Write", "persist output and registry")
        document = OutputDocument(
            profile_id=profile.id,
            profile_name=profile.display_name,
            generated_at=run_at,
            buckets=lifecycle.buckets,
            archive=lifecycle.archive,
            meta=OutputMeta(
                stale_after_days=knobs.stale_after_days,
                inactive_after_days=knobs.inactive_after_days,
                inactive_action=knobs.inactive_action,
                source_counts=counts,
                stale_counts=lifecycle.stale_counts,
                inactive_counts=lifecycle.inactive_counts,
                timings_ms={
                    **ctx.stage_timings_ms(),
                    "fetch": outcome.duration_ms,
                    "total": int((time.monotonic() - run_start) * 1000),
                },
                fetched_postings=len(outcome.postings),
                fetch_timed_out=outcome.timed_out,
            ),
        )
        store.save_output(document)
        store.save_registry(updated_registry)
        ctx.output_path = str(store.output_path)
        ctx.registry_path = str(store.registry_path)
        _end_stage(ctx, "write", 2)

        ctx.complete_run(RunStatus.COMPLETED)

    except Exception as e:
        ctx.complete_run(RunStatus.FAILED)
        if ctx.stage_logs:
            ctx.stage_logs[-1].errors.append(str(e))
        raise

    total = time.monotonic() - run_start
    logger.info(
        "run complete",
        run_id=ctx.run_id,
        output=ctx.output_path,
        registry=ctx.registry_path,
        kept=ctx.metrics.num_postings_kept,
        duration_ms=int(total * 1000),
    )
    verbose.header(
        f"Done: {ctx.metrics.num_postings_kept} active postings, "
        f"{ctx.metrics.num_sources_discovered} new sources ({total:.2f}s)"
    )
    return ctx


def run_pipeline(
    config_path: str | Path | None = None,
    profiles_dir: str | Path | None = None,
    runtime_path: str | Path | None = None,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> RunContext:
    """Synchronous wrapper for run_pipeline_async."""
    return asyncio.run(run_pipeline_async(config_path, profiles_dir, runtime_path, settings, now=now))


def get_run_results(ctx: RunContext) -> dict[str, Any]:
    """Summary plus the written output's per-bucket counts, for inspection."""
    results: dict[str, Any] = {"summary": ctx.summary()}
    if ctx.output_path and ctx.registry_path:
        document = FileRunStore(ctx.output_path, ctx.registry_path).load_output()
        if document is not None:
            results["buckets"] = {k: len(v) for k, v in document.buckets.items()}
            results["archive"] = {k: len(v) for k, v in document.archive.items()}
    return results
