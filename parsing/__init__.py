"""Markup helpers: HTML stripping, XML feeds, JSON-LD job postings."""

from parsing.feeds import child_markup, child_text, find_records, parse_xml
from parsing.jsonld import extract_job_postings
from parsing.normalizers import (
    classify_board,
    collapse_whitespace,
    decode_entities,
    host_of,
    join_nonempty,
    strip_html,
    with_board,
)

__all__ = [
    "child_markup",
    "child_text",
    "classify_board",
    "collapse_whitespace",
    "decode_entities",
    "extract_job_postings",
    "find_records",
    "host_of",
    "join_nonempty",
    "parse_xml",
    "strip_html",
    "with_board",
]
