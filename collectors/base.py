"""Source adapter interface and the fetch task it consumes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import structlog
from pydantic import BaseModel, Field

from collectors.http_client import HttpClient
from core.config import Settings
from schemas.posting import Posting

logger = structlog.get_logger(__name__)


class FetchTask(BaseModel):
    """One request-sized unit of fetch work for one provider."""

    provider: str = Field(..., description="Adapter registry key, e.g. 'greenhouse'")
    target: str = Field(..., description="Company slug, feed URL, page URL or search query")
    country: str | None = None
    params: dict[str, str] = Field(default_factory=dict)

    @property
    def label(self) -> str:
        suffix = f"@{self.country}" if self.country else ""
        return f"{self.provider}:{self.target}{suffix}"


class SourceAdapter(ABC):
    """Normalizes one provider's native response into Posting records.

    Subclasses implement fetch(); callers use collect(), which never raises.
    """

    source_name: str = "base"
    # Fraction of the run's max_concurrency this provider may use
    concurrency_share: float = 1.0
    # Set when the provider needs credentials from Settings
    requires_key: bool = False

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()

    def is_available(self) -> bool:
        """Whether required credentials are present."""
        return True

    def concurrency_limit(self, max_concurrency: int) -> int:
        return max(1, int(max_concurrency * self.concurrency_share))

    @abstractmethod
    async def fetch(self, task: FetchTask, client: HttpClient) -> list[Posting]:
        """Fetch and normalize postings for one task. May raise."""

    async def collect(self, task: FetchTask, client: HttpClient) -> list[Posting]:
        """Fetch postings, degrading any failure to an empty list."""
        if not self.is_available():
            return []
        try:
            return await self.fetch(task, client)
        except Exception as e:
            logger.warning(
                "source failed",
                provider=self.source_name,
                target=task.target,
                country=task.country,
                error=f"{type(e).__name__}: {e}",
            )
            return []


def text(value: Any) -> str:
    """Provider field as a trimmed string; dicts and lists become empty."""
    if value is None or isinstance(value, dict | list):
        return ""
    return str(value).strip()


def dig(data: Any, *path: str) -> Any:
    """Walk nested dicts, returning None at the first missing step."""
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def as_records(data: Any, *keys: str) -> list[dict[str, Any]]:
    """Job records from a payload that is either a list or a dict holding one."""
    if isinstance(data, list):
        items = data
    else:
        items = []
        for key in keys:
            value = dig(data, key)
            if isinstance(value, list):
                items = value
                break
    return [item for item in items if isinstance(item, dict)]
