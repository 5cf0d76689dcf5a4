"""Aggregator and remote-jobs boards.

Arbeitnow, Remotive and Jobicy are keyless and fetched once per run.
Adzuna and Jooble are keyed and fan out one task per (country, query).
"""

from __future__ import annotations

from collectors.base import FetchTask, SourceAdapter, as_records, dig, text
from collectors.http_client import HttpClient
from parsing.normalizers import strip_html
from schemas.posting import Posting

ARBEITNOW_URL = "https://www.arbeitnow.com/api/job-board-api"
REMOTIVE_URL = "https://remotive.com/api/remote-jobs"
JOBICY_URL = "https://jobicy.com/api/v2/remote-jobs"


class ArbeitnowAdapter(SourceAdapter):
    source_name = "arbeitnow"

    async def fetch(self, task: FetchTask, client: HttpClient) -> list[Posting]:
        data = await client.get_json(ARBEITNOW_URL)
        return [
            Posting(
                source=self.source_name,
                company=text(j.get("company_name")),
                title=text(j.get("title")),
                location=text(j.get("location")),
                url=text(j.get("url")),
                updated_at=text(j.get("created_at")) or None,
                description=strip_html(text(j.get("description"))),
                job_types=j.get("job_types") if isinstance(j.get("job_types"), list) else [],
                remote=bool(j.get("remote")),
            )
            for j in as_records(data, "data")
        ]


class RemotiveAdapter(SourceAdapter):
    source_name = "remotive"

    async def fetch(self, task: FetchTask, client: HttpClient) -> list[Posting]:
        data = await client.get_json(REMOTIVE_URL)
        return [
            Posting(
                source=self.source_name,
                company=text(j.get("company_name")),
                title=text(j.get("title")),
                location=text(j.get("candidate_required_location")),
                url=text(j.get("url")),
                updated_at=text(j.get("publication_date")) or None,
                description=strip_html(text(j.get("description"))),
                job_types=[text(j.get("job_type"))] if text(j.get("job_type")) else [],
                remote=True,
            )
            for j in as_records(data, "jobs")
        ]


class JobicyAdapter(SourceAdapter):
    source_name = "jobicy"

    async def fetch(self, task: FetchTask, client: HttpClient) -> list[Posting]:
        data = await client.get_json(JOBICY_URL)
        return [
            Posting(
                source=self.source_name,
                company=text(j.get("companyName")) or text(j.get("company")),
                title=text(j.get("jobTitle")) or text(j.get("title")),
                location=text(j.get("jobGeo")) or text(j.get("location")),
                url=text(j.get("url")) or text(j.get("jobUrl")),
                updated_at=text(j.get("pubDate")) or text(j.get("publishedAt")) or None,
                description=strip_html(text(j.get("jobDescription")) or text(j.get("description"))),
                remote=True,
            )
            for j in as_records(data, "jobs")
        ]


class AdzunaAdapter(SourceAdapter):
    source_name = "adzuna"
    concurrency_share = 0.5
    requires_key = True

    def is_available(self) -> bool:
        return self.settings.has_adzuna

    async def fetch(self, task: FetchTask, client: HttpClient) -> list[Posting]:
        country = task.country or "de"
        data = await client.get_json(
            f"https://api.adzuna.com/v1/api/jobs/{country}/search/1",
            params={
                "app_id": self.settings.adzuna_app_id,
                "app_key": self.settings.adzuna_app_key,
                "results_per_page": 50,
                "what": task.target,
            },
        )
        return [
            Posting(
                source=self.source_name,
                source_note=f"Query: {task.target}",
                company=text(dig(j, "company", "display_name")),
                title=strip_html(text(j.get("title"))),
                location=text(dig(j, "location", "display_name")),
                url=text(j.get("redirect_url")),
                updated_at=text(j.get("created")) or None,
                description=strip_html(text(j.get("description"))),
                job_types=[t for t in [text(j.get("contract_time"))] if t],
            )
            for j in as_records(data, "results")
        ]


class JoobleAdapter(SourceAdapter):
    source_name = "jooble"
    concurrency_share = 0.5
    requires_key = True

    def is_available(self) -> bool:
        return self.settings.has_jooble

    async def fetch(self, task: FetchTask, client: HttpClient) -> list[Posting]:
        country = task.country or "de"
        data = await client.post_json(
            f"https://{country}.jooble.org/api/{self.settings.jooble_api_key}",
            {"keywords": task.target, "location": country.upper()},
        )
        return [
            Posting(
                source=self.source_name,
                source_note=f"Query: {task.target}",
                company=text(j.get("company")),
                title=text(j.get("title")),
                location=text(j.get("location")) or country.upper(),
                url=text(j.get("link")),
                updated_at=text(j.get("updated")) or None,
                description=strip_html(text(j.get("snippet"))),
                job_types=[t for t in [text(j.get("type"))] if t],
            )
            for j in as_records(data, "jobs")
        ]
