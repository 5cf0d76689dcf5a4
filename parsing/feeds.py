"""XML feed extraction (Personio position feeds, RSS job feeds)."""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from parsing.normalizers import collapse_whitespace, decode_entities


def parse_xml(text: str) -> BeautifulSoup:
    """Parse an XML document leniently; malformed input yields what lxml recovers."""
    return BeautifulSoup(text, "xml")


def find_records(doc: BeautifulSoup, tag: str) -> list[Tag]:
    return [node for node in doc.find_all(tag) if isinstance(node, Tag)]


def child_text(node: Tag, *names: str) -> str:
    """Text of the first direct child among ``names`` that has content.

    Entities are decoded once more after parsing, so double-escaped
    feeds ("R&amp;amp;D") come out readable.
    """
    for name in names:
        child = node.find(name, recursive=False)
        if isinstance(child, Tag):
            value = collapse_whitespace(decode_entities(child.get_text()))
            if value:
                return value
    return ""


def child_markup(node: Tag, *names: str) -> str:
    """Raw inner text of the first matching child, for fields that carry HTML."""
    for name in names:
        child = node.find(name, recursive=False)
        if isinstance(child, Tag):
            value = decode_entities(child.get_text(separator=" "))
            if value.strip():
                return value
    return ""
