"""Shared HTTP client for track page downloads."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_CONNECT_TIMEOUT_SECONDS = 10.0
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; SongTagsBot/0.1)"


@dataclass(slots=True)
class FetchResult:
    """Outcome of one page download."""

    url: str
    status_code: int
    content: str
    is_success: bool
    error: str | None = None


class HttpFetcher:
    """Thread-safe ``httpx.Client`` wrapper shared by all lookup workers.

    Transport errors and timeouts are folded into a failed ``FetchResult``
    instead of raising, so callers handle one shape. There are no retries: a
    failed page is reported once and left for the operator to re-run.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        headers: dict[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        base_headers = {"User-Agent": user_agent, "Accept-Language": "en"}
        if headers:
            base_headers.update(headers)
        self._timeout_seconds = timeout_seconds
        self._client = httpx.Client(
            timeout=httpx.Timeout(
                timeout_seconds,
                connect=min(DEFAULT_CONNECT_TIMEOUT_SECONDS, timeout_seconds),
            ),
            headers=base_headers,
            transport=transport,
            follow_redirects=True,
        )

    def get(self, url: str) -> FetchResult:
        """Download ``url`` within one overall deadline of ``timeout_seconds``.

        The httpx timeout applies per phase, so a server trickling bytes could
        otherwise hold the worker indefinitely. The body is streamed and the
        deadline is checked between chunks.
        """

        deadline = time.monotonic() + self._timeout_seconds
        try:
            with self._client.stream("GET", url) as response:
                chunks: list[bytes] = []
                for chunk in response.iter_bytes():
                    chunks.append(chunk)
                    if time.monotonic() > deadline:
                        logger.debug("Deadline exceeded reading %s", url)
                        return _failed(url, "timeout")
                body = b"".join(chunks)
        except httpx.TimeoutException:
            logger.debug("Timeout fetching %s", url)
            return _failed(url, "timeout")
        except httpx.HTTPError as exc:
            logger.debug("HTTP error fetching %s: %s", url, exc)
            return _failed(url, str(exc))

        return FetchResult(
            url=url,
            status_code=response.status_code,
            content=body.decode(response.charset_encoding or "utf-8", errors="replace"),
            is_success=response.is_success,
            error=None if response.is_success else f"HTTP {response.status_code}",
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpFetcher:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


def _failed(url: str, error: str) -> FetchResult:
    return FetchResult(url=url, status_code=0, content="", is_success=False, error=error)
