"""Regex + term matching used by the bucket gates and the scorer."""

from __future__ import annotations

import re
from dataclasses import dataclass

from core.ids import normalize_text


def includes_any(text: str | None, terms: list[str]) -> bool:
    """Any non-empty term occurs in text (normalized substring match)."""
    base = normalize_text(text)
    if not terms or not base:
        return False
    return any((needle := normalize_text(t)) and needle in base for t in terms)


def includes_all(text: str | None, terms: list[str]) -> bool:
    """Every term occurs in text. An empty term list always passes."""
    if not terms:
        return True
    base = normalize_text(text)
    if not base:
        return False
    return all((needle := normalize_text(t)) and needle in base for t in terms)


@dataclass(frozen=True)
class Gate:
    """Case-insensitive regexes plus plain terms; matches if either side hits."""

    patterns: tuple[re.Pattern[str], ...] = ()
    terms: tuple[str, ...] = ()

    @classmethod
    def build(cls, patterns: list[str] | None = None, terms: list[str] | None = None) -> Gate:
        return cls(
            patterns=tuple(re.compile(p, re.IGNORECASE) for p in patterns or []),
            terms=tuple(t for t in terms or [] if t),
        )

    @property
    def defined(self) -> bool:
        return bool(self.patterns or self.terms)

    def matches(self, text: str | None) -> bool:
        if not text:
            return False
        return any(p.search(text) for p in self.patterns) or includes_any(text, list(self.terms))
