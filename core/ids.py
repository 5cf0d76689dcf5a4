"""ID generation, slugs and deduplication keys."""

from __future__ import annotations

import re
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone


def generate_run_id() -> str:
    """Generate a unique run ID.

    Format: YYYYMMDD_HHMMSS_<short_uuid>
    """
    now = datetime.now(timezone.utc)
    short_uuid = uuid.uuid4().hex[:8]
    return f"{now.strftime('%Y%m%d_%H%M%S')}_{short_uuid}"


def normalize_text(text: str | None) -> str:
    """Lowercase and collapse whitespace."""
    return re.sub(r"\s+", " ", str(text or "").lower()).strip()


def slugify(text: str) -> str:
    """Convert a company name to an ATS-style slug.

    "Zalando SE" -> "zalando-se", "Procter & Gamble" -> "procter-and-gamble"
    """
    text = text.lower().replace("&", "and")
    text = re.sub(r"[^a-z0-9]+", "-", text)
    return text.strip("-")


def dedupe_key(*parts: str | None) -> str:
    """Join parts with '|' and normalize, for set-based deduplication."""
    return normalize_text("|".join(p or "" for p in parts))


def unique(items: Iterable[str]) -> list[str]:
    """Order-preserving de-duplication that drops empty entries."""
    seen: set[str] = set()
    out: list[str] = []
    for item in items:
        if not item or item in seen:
            continue
        seen.add(item)
        out.append(item)
    return out
