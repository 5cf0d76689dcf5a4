"""XML-based providers: Personio position feeds and StepStone-style RSS feeds."""

from __future__ import annotations

from collectors.base import FetchTask, SourceAdapter
from collectors.http_client import HttpClient
from parsing.feeds import child_markup, child_text, find_records, parse_xml
from parsing.normalizers import host_of, join_nonempty, strip_html
from schemas.posting import Posting

XML_ACCEPT = "application/xml,text/xml;q=0.9,*/*;q=0.8"
RSS_ACCEPT = "application/xml,text/xml;q=0.9,application/rss+xml;q=0.9,*/*;q=0.8"


def personio_feed_urls(slug: str) -> list[str]:
    """Both regional Personio feed shapes for a company slug."""
    return [
        f"https://{slug}.jobs.personio.de/xml",
        f"https://{slug}.jobs.personio.com/xml",
    ]


class PersonioXmlAdapter(SourceAdapter):
    source_name = "personio-xml"
    concurrency_share = 0.5

    async def fetch(self, task: FetchTask, client: HttpClient) -> list[Posting]:
        feed_url = task.target
        host = host_of(feed_url) or "personio"
        doc = parse_xml(await client.get_text(feed_url, headers={"accept": XML_ACCEPT}))

        postings = []
        for position in find_records(doc, "position"):
            url = child_text(position, "url", "application-form-url")
            job_id = child_text(position, "id")
            if not url and job_id and host != "personio":
                url = f"https://{host}/job/{job_id}"
            postings.append(
                Posting(
                    source=self.source_name,
                    source_note=f"Source: {host}",
                    company=child_text(position, "company", "subcompany") or host,
                    title=child_text(position, "name", "title"),
                    location=join_nonempty(
                        [child_text(position, n) for n in ("office", "city", "country")]
                    ),
                    url=url,
                    updated_at=child_text(position, "occupationDate", "createdAt", "updatedAt") or None,
                    description=strip_html(child_markup(position, "jobDescriptions", "description")),
                    job_types=[t for t in [child_text(position, "employmentType")] if t],
                )
            )
        return postings


class StepstoneFeedAdapter(SourceAdapter):
    source_name = "stepstone-feed"
    concurrency_share = 0.5

    async def fetch(self, task: FetchTask, client: HttpClient) -> list[Posting]:
        feed_url = task.target
        host = host_of(feed_url) or "stepstone"
        doc = parse_xml(await client.get_text(feed_url, headers={"accept": RSS_ACCEPT}))

        return [
            Posting(
                source=f"{self.source_name}:{host}",
                company=child_text(item, "company", "author") or "stepstone",
                title=child_text(item, "title"),
                location=child_text(item, "location", "city"),
                url=child_text(item, "link"),
                updated_at=child_text(item, "pubDate") or None,
                description=strip_html(child_markup(item, "description")),
            )
            for item in find_records(doc, "item")
        ]
