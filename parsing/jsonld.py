"""JSON-LD ``JobPosting`` extraction from career pages."""

from __future__ import annotations

import json
from typing import Any

from bs4 import BeautifulSoup, Tag

from parsing.normalizers import join_nonempty, strip_html


def _json_blocks(html_text: str) -> list[Any]:
    soup = BeautifulSoup(html_text, "lxml")
    blocks: list[Any] = []
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        if not isinstance(script, Tag):
            continue
        body = (script.string or script.get_text() or "").strip()
        if not body:
            continue
        try:
            blocks.append(json.loads(body))
        except ValueError:
            continue
    return blocks


def _nodes(block: Any) -> list[dict[str, Any]]:
    """Flatten a block: a single node, a list of nodes, or an @graph container."""
    if isinstance(block, list):
        out: list[dict[str, Any]] = []
        for item in block:
            out.extend(_nodes(item))
        return out
    if not isinstance(block, dict):
        return []
    if isinstance(block.get("@graph"), list):
        return [block, *_nodes(block["@graph"])]
    return [block]


def _is_job_posting(node: dict[str, Any]) -> bool:
    kind = node.get("@type")
    kinds = kind if isinstance(kind, list) else [kind]
    return any(str(k or "").lower() == "jobposting" for k in kinds)


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _location(node: dict[str, Any]) -> str:
    parts: list[str] = []
    for place in _as_list(node.get("jobLocation")):
        if not isinstance(place, dict):
            continue
        for address in _as_list(place.get("address")):
            if isinstance(address, str):
                parts.append(address)
                continue
            if not isinstance(address, dict):
                continue
            country = address.get("addressCountry")
            if isinstance(country, dict):
                country = country.get("name")
            parts.append(
                join_nonempty([address.get("addressLocality"), address.get("addressRegion"), country])
            )
    return join_nonempty(parts, sep=" | ")


def extract_job_postings(html_text: str, page_url: str, fallback_company: str = "") -> list[dict[str, Any]]:
    """Return one field dict per JobPosting node that has a title and a url.

    The page URL stands in for postings that embed no url of their own.
    """
    postings: list[dict[str, Any]] = []
    for block in _json_blocks(html_text):
        for node in _nodes(block):
            if not _is_job_posting(node):
                continue
            title = str(node.get("title") or "").strip()
            url = str(node.get("url") or page_url or "").strip()
            if not title or not url:
                continue
            org = node.get("hiringOrganization")
            company = str(org.get("name") or "").strip() if isinstance(org, dict) else ""
            postings.append(
                {
                    "company": company or fallback_company or "official-site",
                    "title": title,
                    "location": _location(node),
                    "url": url,
                    "updated_at": str(node.get("datePosted") or "").strip() or None,
                    "description": strip_html(str(node.get("description") or "")),
                    "job_types": [str(t) for t in _as_list(node.get("employmentType")) if t],
                    "remote": str(node.get("jobLocationType") or "").upper() == "TELECOMMUTE",
                }
            )
    return postings
