"""SerpAPI-backed search: Google Jobs results and organic web results.

Results can point anywhere, so each posting's source is refined with the
board its URL lands on (``serpapi-job-boards:linkedin``).
"""

from __future__ import annotations

import re
from typing import Any

from collectors.base import FetchTask, SourceAdapter, as_records, dig, text
from collectors.http_client import HttpClient
from parsing.normalizers import strip_html, with_board
from schemas.posting import Posting

SERPAPI_URL = "https://serpapi.com/search.json"

JOB_BOARD_LINK = re.compile(r"linkedin\.com|indeed\.|xing\.com|naukri\.com|stepstone\.", re.IGNORECASE)
OFFICIAL_SITE_LINK = re.compile(
    r"/careers|/jobs|job-?board|workdayjobs|greenhouse|lever|smartrecruiters|teamtailor|recruitee|ashby",
    re.IGNORECASE,
)


def board_query(query: str) -> str:
    return f"{query} site:linkedin.com/jobs OR site:indeed.com OR site:xing.com OR site:naukri.com OR site:stepstone."


def official_sites_query(query: str) -> str:
    return f"{query} careers jobs official site"


class _SerpApiAdapter(SourceAdapter):
    concurrency_share = 0.5
    requires_key = True
    engine = "google"

    def is_available(self) -> bool:
        return self.settings.has_serpapi

    async def _search(self, task: FetchTask, client: HttpClient, **extra: Any) -> Any:
        return await client.get_json(
            SERPAPI_URL,
            params={
                "engine": self.engine,
                "api_key": self.settings.serpapi_api_key,
                "q": task.target,
                "gl": task.params.get("gl", "de").lower(),
                "hl": task.params.get("hl", "en").lower(),
                **extra,
            },
        )


class SerpApiGoogleJobsAdapter(_SerpApiAdapter):
    source_name = "serpapi-google-jobs"
    engine = "google_jobs"

    async def fetch(self, task: FetchTask, client: HttpClient) -> list[Posting]:
        data = await self._search(task, client)
        postings = []
        for j in as_records(data, "jobs_results"):
            apply_options = j.get("apply_options")
            related = j.get("related_links")
            apply_url = ""
            if isinstance(apply_options, list) and apply_options and isinstance(apply_options[0], dict):
                apply_url = text(apply_options[0].get("link"))
            if not apply_url and isinstance(related, list) and related and isinstance(related[0], dict):
                apply_url = text(related[0].get("link"))
            postings.append(
                Posting(
                    source=with_board(self.source_name, apply_url),
                    source_note=f"Query: {task.target}",
                    company=text(j.get("company_name")),
                    title=text(j.get("title")),
                    location=text(j.get("location")),
                    url=apply_url,
                    updated_at=text(dig(j, "detected_extensions", "posted_at")) or None,
                    description=strip_html(text(j.get("description"))),
                    job_types=[t for t in [text(dig(j, "detected_extensions", "schedule_type"))] if t],
                    remote=bool(dig(j, "detected_extensions", "work_from_home")),
                )
            )
        return postings


class SerpApiOrganicAdapter(_SerpApiAdapter):
    """Organic results filtered down to links that look like job pages."""

    link_filter: re.Pattern[str] = JOB_BOARD_LINK

    async def fetch(self, task: FetchTask, client: HttpClient) -> list[Posting]:
        data = await self._search(task, client, num=20)
        postings = []
        for r in as_records(data, "organic_results"):
            link = text(r.get("link"))
            if not self.link_filter.search(link):
                continue
            postings.append(
                Posting(
                    source=with_board(self.source_name, link),
                    source_note=f"Query: {task.target}",
                    title=text(r.get("title")),
                    url=link,
                    description=strip_html(text(r.get("snippet"))),
                )
            )
        return postings


class SerpApiJobBoardsAdapter(SerpApiOrganicAdapter):
    source_name = "serpapi-job-boards"
    link_filter = JOB_BOARD_LINK


class SerpApiOfficialSitesAdapter(SerpApiOrganicAdapter):
    source_name = "serpapi-official-sites"
    link_filter = OFFICIAL_SITE_LINK
