"""HTTP transport used by GitHubRequest.

The fetcher owns all retry and throttle policy; a transport issues exactly
one GET per call and reports what happened. Every HTTP status comes back as
a TransportResponse. Only the absence of a response is an exception
(GitHubNetworkError).
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from githubkit import GitHub
from githubkit.exception import RequestError, RequestFailed, RequestTimeout

from ospo_crawler.config import get_settings
from ospo_crawler.logging import get_logger

from .exceptions import GitHubNetworkError

if TYPE_CHECKING:
    from githubkit import Response

logger = get_logger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    """Outcome of a single GET that produced an HTTP response."""

    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    url: str = ""
    elapsed_ms: float = 0.0

    def __post_init__(self) -> None:
        # header lookups are always lower-case
        object.__setattr__(
            self, "headers", {name.lower(): str(value) for name, value in self.headers.items()}
        )

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


@runtime_checkable
class Transport(Protocol):
    """Anything that can issue one GET and report the response."""

    async def get(self, url: str, *, headers: Mapping[str, str]) -> TransportResponse:
        """Issue a GET.

        Raises:
            GitHubNetworkError: If no response was received.
        """
        ...


def _decode_body(response: Response[Any]) -> Any:
    """JSON-decode when the payload is JSON, otherwise return text."""
    if not response.content:
        return None
    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        try:
            return response.json()
        except ValueError:
            logger.debug("Body declared as {} is not valid JSON", content_type)
    return response.text


class GitHubKitTransport:
    """Transport over a githubkit client with its own retrying disabled.

    githubkit would otherwise sleep through rate limits and retry server
    errors itself; GitHubRequest applies that policy instead and records it.

    Usage:
        async with GitHubKitTransport() as transport:
            request = GitHubRequest(transport=transport)
            repos = await request.get_all("https://api.github.com/orgs/x/repos")
    """

    def __init__(self, *, timeout: float | None = None, github: GitHub[Any] | None = None) -> None:
        """Initialize the transport.

        Args:
            timeout: Per-attempt timeout in seconds (defaults to settings).
            github: Preconfigured githubkit client, mainly for tests.
        """
        self._timeout = timeout or get_settings().fetch.timeout_seconds
        self._client = github

    @property
    def _github(self) -> GitHub[Any]:
        """Get or create the githubkit client instance.

        Authentication travels in the request headers, so the client itself
        is unauthenticated.
        """
        if self._client is None:
            self._client = GitHub(auto_retry=False, timeout=self._timeout)
        return self._client

    async def get(self, url: str, *, headers: Mapping[str, str]) -> TransportResponse:
        started = time.perf_counter()
        try:
            response = await self._github.arequest("GET", url, headers=dict(headers))
        except RequestFailed as e:
            # error statuses are data for the fetcher, not exceptions
            response = e.response
        except (RequestError, RequestTimeout) as e:
            logger.debug("No response from {}: {!r}", url, e)
            raise GitHubNetworkError(f"Request to {url} failed: {e}", url=url) from e

        return TransportResponse(
            status_code=response.status_code,
            headers=dict(response.headers.items()),
            body=_decode_body(response),
            url=url,
            elapsed_ms=(time.perf_counter() - started) * 1000,
        )

    async def close(self) -> None:
        """Drop the underlying githubkit client."""
        self._client = None

    async def __aenter__(self) -> GitHubKitTransport:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()
