"""HTTP client wrapper with courtesy delay, per-request timeout and retries."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

# Failures worth another attempt: transport errors, non-2xx, timeouts, bad JSON.
RETRYABLE = (httpx.HTTPError, TimeoutError, ValueError)


class HttpClient:
    """Shared async client for adapters and probes.

    Every request sleeps ``request_delay`` seconds first, then is aborted
    after ``timeout`` seconds of network time, and is retried ``max_retries`` more times on failure.
    The final failure is raised to the caller.
    """

    def __init__(
        self,
        timeout: float = 15.0,
        request_delay: float = 0.0,
        max_retries: int = 2,
        retry_backoff: float = 0.5,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.request_delay = request_delay
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.user_agent = user_agent or "roles-radar/0.1 (+job posting aggregator)"
        self._transport = transport

        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> HttpClient:
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers={"User-Agent": self.user_agent},
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """GET a URL and decode its JSON body."""
        return await self._with_retry(
            "GET",
            url,
            params=params,
            headers={"accept": "application/json", **(headers or {})},
            decode="json",
        )

    async def get_text(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> str:
        """GET a URL and return its body as text."""
        return await self._with_retry("GET", url, params=params, headers=headers, decode="text")

    async def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> Any:
        """POST a JSON payload and decode the JSON response."""
        return await self._with_retry(
            "POST",
            url,
            json=payload,
            headers={"accept": "application/json", **(headers or {})},
            decode="json",
        )

    async def _with_retry(self, method: str, url: str, decode: str, **kwargs: Any) -> Any:
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.retry_backoff, max=10),
            retry=retry_if_exception_type(RETRYABLE),
            reraise=True,
        ):
            with attempt:
                if self.request_delay > 0:
                    await asyncio.sleep(self.request_delay)
                return await asyncio.wait_for(
                    self._send(method, url, decode, **kwargs), timeout=self.timeout
                )
        raise RuntimeError("unreachable")  # pragma: no cover

    async def _send(self, method: str, url: str, decode: str, **kwargs: Any) -> Any:
        response = await self._client.request(method, url, **kwargs)  # type: ignore[union-attr]
        response.raise_for_status()
        if decode == "json":
            return response.json()
        return response.text
