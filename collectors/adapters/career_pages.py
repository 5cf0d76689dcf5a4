"""Official career pages: postings from embedded JSON-LD markup."""

from __future__ import annotations

from collectors.base import FetchTask, SourceAdapter
from collectors.http_client import HttpClient
from parsing.jsonld import extract_job_postings
from schemas.posting import Posting


class CareerPageAdapter(SourceAdapter):
    """Extract every JobPosting block from a company's careers page."""

    source_name = "official-jsonld"
    concurrency_share = 0.5

    async def fetch(self, task: FetchTask, client: HttpClient) -> list[Posting]:
        page_url = task.target
        html_text = await client.get_text(page_url, headers={"accept": "text/html,application/xhtml+xml"})
        return [
            Posting(source=self.source_name, source_note=f"Source: {page_url}", **fields)
            for fields in extract_job_postings(html_text, page_url, task.params.get("company", ""))
        ]
