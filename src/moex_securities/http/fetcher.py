"""HTTP client for the securities search endpoint."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import quote_plus

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_USER_AGENT = "moex-securities/1.0"


@dataclass(slots=True)
class FetchResult:
    """Result of an HTTP fetch operation."""

    url: str
    status_code: int
    content: str
    is_success: bool
    error: str | None = None


def build_search_url(base_url: str, query: str, *, param: str = "q") -> str:
    """Append the UTF-8 form-encoded query as the single query parameter."""

    return f"{base_url}?{param}={quote_plus(query, encoding='utf-8')}"


class HttpFetcher:
    """HTTP client wrapper with timeout and user-agent configuration.

    Requests are never retried: a transport error or non-success status is
    reported once in the returned ``FetchResult``. The underlying client is
    shared by all worker threads.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        headers: dict[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._timeout = httpx.Timeout(timeout_seconds, connect=10.0)
        base_headers = {"User-Agent": user_agent, "Accept": "application/json"}
        if headers:
            base_headers.update(headers)
        self._client = httpx.Client(
            timeout=self._timeout,
            headers=base_headers,
            transport=transport or httpx.HTTPTransport(retries=0),
            follow_redirects=True,
        )

    def fetch(self, url: str) -> FetchResult:
        """Fetch URL content, returning structured result."""

        try:
            response = self._client.get(url)
            return FetchResult(
                url=url,
                status_code=response.status_code,
                content=response.text,
                is_success=response.is_success,
                error=None if response.is_success else f"HTTP {response.status_code}",
            )
        except httpx.TimeoutException:
            logger.warning("Timeout fetching %s", url)
            return _failure(url, "timeout")
        except httpx.HTTPError as exc:
            logger.warning("HTTP error fetching %s: %s", url, exc)
            return _failure(url, str(exc) or type(exc).__name__)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpFetcher:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


def _failure(url: str, error: str) -> FetchResult:
    return FetchResult(url=url, status_code=0, content="", is_success=False, error=error)
