"""ATS job-board JSON APIs, one company (board) per task."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from collectors.base import FetchTask, SourceAdapter, as_records, dig, text
from collectors.http_client import HttpClient
from parsing.normalizers import decode_entities, join_nonempty, strip_html
from schemas.posting import Posting


def greenhouse_url(company: str) -> str:
    return f"https://boards-api.greenhouse.io/v1/boards/{company}/jobs?content=true"


def lever_url(company: str) -> str:
    return f"https://api.lever.co/v0/postings/{company}?mode=json"


def smartrecruiters_url(company: str, limit: int = 100) -> str:
    return f"https://api.smartrecruiters.com/v1/companies/{company}/postings?limit={limit}"


def teamtailor_url(company: str) -> str:
    return f"https://{company}.teamtailor.com/jobs.json"


def recruitee_url(company: str) -> str:
    return f"https://{company}.recruitee.com/api/offers/"


def ashby_url(organization: str) -> str:
    return f"https://api.ashbyhq.com/posting-api/job-board/{organization}"


def epoch_ms_to_iso(value: Any) -> str | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return text(value) or None
    try:
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc).isoformat()
    except (OverflowError, OSError, ValueError):
        return None


class GreenhouseAdapter(SourceAdapter):
    source_name = "greenhouse"

    async def fetch(self, task: FetchTask, client: HttpClient) -> list[Posting]:
        company = task.target
        data = await client.get_json(greenhouse_url(company))
        return [
            Posting(
                source=self.source_name,
                company=company,
                title=text(j.get("title")),
                location=text(dig(j, "location", "name")),
                url=text(j.get("absolute_url")),
                updated_at=text(j.get("updated_at")) or None,
                # content arrives HTML-escaped
                description=strip_html(decode_entities(text(j.get("content")))),
            )
            for j in as_records(data, "jobs")
        ]


class LeverAdapter(SourceAdapter):
    source_name = "lever"

    async def fetch(self, task: FetchTask, client: HttpClient) -> list[Posting]:
        company = task.target
        data = await client.get_json(lever_url(company))
        return [
            Posting(
                source=self.source_name,
                company=company,
                title=text(j.get("text")),
                location=text(dig(j, "categories", "location")),
                url=text(j.get("hostedUrl")) or text(j.get("applyUrl")),
                updated_at=epoch_ms_to_iso(j.get("createdAt")),
                description=strip_html(text(j.get("description"))),
                job_types=[text(dig(j, "categories", "commitment"))]
                if text(dig(j, "categories", "commitment"))
                else [],
                remote=text(j.get("workplaceType")).lower() == "remote",
            )
            for j in as_records(data, "postings")
        ]


class SmartRecruitersAdapter(SourceAdapter):
    source_name = "smartrecruiters"

    async def fetch(self, task: FetchTask, client: HttpClient) -> list[Posting]:
        company = task.target
        data = await client.get_json(smartrecruiters_url(company))
        postings = []
        for j in as_records(data, "content"):
            location = text(dig(j, "location", "fullLocation")) or join_nonempty(
                [dig(j, "location", "city"), dig(j, "location", "country")]
            )
            postings.append(
                Posting(
                    source=self.source_name,
                    company=text(dig(j, "company", "name")) or company,
                    title=text(j.get("name")),
                    location=location,
                    url=text(j.get("ref"))
                    or f"https://jobs.smartrecruiters.com/{company}/{text(j.get('id'))}",
                    updated_at=text(j.get("releasedDate")) or text(j.get("postingDate")) or None,
                    description=strip_html(
                        text(dig(j, "jobAd", "sections", "jobDescription", "text"))
                    ),
                    remote=bool(dig(j, "location", "remote")),
                )
            )
        return postings


class TeamtailorAdapter(SourceAdapter):
    source_name = "teamtailor"

    async def fetch(self, task: FetchTask, client: HttpClient) -> list[Posting]:
        company = task.target
        data = await client.get_json(teamtailor_url(company))
        return [
            Posting(
                source=self.source_name,
                company=text(j.get("company_name")) or company,
                title=text(j.get("title")),
                location=text(j.get("location")) or text(j.get("city")),
                url=text(j.get("url")) or f"https://{company}.teamtailor.com/jobs/{text(j.get('id'))}",
                updated_at=text(j.get("updated_at")) or text(j.get("created_at")) or None,
                description=strip_html(text(j.get("body")) or text(j.get("description"))),
            )
            for j in as_records(data, "jobs")
        ]


class RecruiteeAdapter(SourceAdapter):
    source_name = "recruitee"

    async def fetch(self, task: FetchTask, client: HttpClient) -> list[Posting]:
        company = task.target
        data = await client.get_json(recruitee_url(company))
        return [
            Posting(
                source=self.source_name,
                company=text(j.get("company_name")) or company,
                title=text(j.get("title")),
                location=join_nonempty([text(j.get("location")), text(j.get("city")), text(j.get("country"))]),
                url=text(j.get("careers_url")) or text(j.get("careers_apply_url")) or text(j.get("url")),
                updated_at=text(j.get("updated_at")) or text(j.get("created_at")) or None,
                description=strip_html(text(j.get("description"))),
                remote=bool(j.get("remote")),
            )
            for j in as_records(data, "offers")
        ]


class AshbyAdapter(SourceAdapter):
    source_name = "ashby"

    async def fetch(self, task: FetchTask, client: HttpClient) -> list[Posting]:
        organization = task.target
        data = await client.get_json(ashby_url(organization))
        return [
            Posting(
                source=self.source_name,
                company=text(j.get("organizationName")) or organization,
                title=text(j.get("title")),
                location=text(j.get("location")) or text(j.get("locationName")),
                url=text(j.get("applyUrl")) or text(j.get("jobUrl")) or text(j.get("url")),
                updated_at=text(j.get("updatedAt")) or text(j.get("publishedAt")) or None,
                description=strip_html(text(j.get("descriptionHtml")) or text(j.get("description"))),
                job_types=[text(j.get("employmentType"))] if text(j.get("employmentType")) else [],
                remote=bool(j.get("isRemote")),
            )
            for j in as_records(data, "jobs")
        ]
