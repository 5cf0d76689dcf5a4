"""Pure utility functions for text extraction and normalization."""

from __future__ import annotations

import html
import re
import warnings
from urllib.parse import urlparse

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

# Tags removed entirely before extracting text
_STRIP_TAGS = ("script", "style")

# Host fragment -> board label, checked in order
_KNOWN_BOARDS: tuple[tuple[str, str], ...] = (
    ("linkedin.com", "linkedin"),
    ("indeed.", "indeed"),
    ("xing.com", "xing"),
    ("naukri.com", "naukri"),
    ("stepstone.", "stepstone"),
    ("smartrecruiters.com", "smartrecruiters"),
    ("greenhouse.io", "greenhouse"),
    ("lever.co", "lever"),
    ("teamtailor.com", "teamtailor"),
    ("recruitee.com", "recruitee"),
    ("ashbyhq.com", "ashby"),
)


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text.replace("\x00", "")).strip()


def strip_html(markup: str | None) -> str:
    """Plain text from an HTML fragment.

    Drops <script>/<style> blocks, then every remaining tag, and collapses
    whitespace. Tolerates broken markup and plain text input.
    """
    if not markup:
        return ""
    if "<" not in markup and "&" not in markup:
        return collapse_whitespace(markup)
    with warnings.catch_warnings():
        # short fragments like "R&amp;D" look like file names to bs4
        warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
        soup = BeautifulSoup(markup, "lxml")
    for tag_name in _STRIP_TAGS:
        for tag in soup.find_all(tag_name):
            tag.decompose()
    return collapse_whitespace(soup.get_text(separator=" "))


def decode_entities(text: str | None) -> str:
    """Decode HTML/XML character references (&amp;, &#39;, ...)."""
    return html.unescape(text or "")


def host_of(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def classify_board(url: str) -> str:
    """Label the site a URL points at: a known board, else its host, else 'web'."""
    host = host_of(url)
    if not host:
        return "web"
    for fragment, label in _KNOWN_BOARDS:
        if fragment in host:
            return label
    return host


def with_board(base: str, url: str) -> str:
    """Refine a source tag with the destination board, e.g. 'serpapi-google-jobs:indeed'."""
    return f"{base}:{classify_board(url)}"


def join_nonempty(parts: list[object], sep: str = ", ") -> str:
    return sep.join(str(p).strip() for p in parts if p and str(p).strip())
