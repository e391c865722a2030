"""Paginated, retrying GitHub GET requests.

GitHubRequest fetches one resource, following ``Link: rel="next"`` pages
strictly in sequence, and retries each page on its own:

- network failures and 5xx responses wait ``retry_delay`` ms
- 403 responses wait ``forbidden_delay`` ms
- both kinds share one ``max_attempts`` counter per page

Every page leaves one ActivityRecord (attempts plus the ordered delays) in
``GitHubRequest.activity``. Per page the states run
Pending -> (Attempting -> RetryWait | ForbiddenWait)* -> Delivered | Failed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import httpx

from ospo_crawler.logging import bind_url, get_logger

from .activity import ActivityLog, ActivityRecord, Delay, DelayKind
from .exceptions import (
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubExhaustedRetriesError,
    GitHubNetworkError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubRetryableError,
    GitHubServerError,
)
from .options import FetchOptions, merge_options
from .page import PageResult
from .rate_limit import RateLimitTracker
from .transport import GitHubKitTransport, Transport, TransportResponse

logger = get_logger(__name__)

PER_PAGE_PARAM = "per_page"


class GitHubRequest:
    """Fetch GitHub resources with pagination and retry orchestration.

    Usage:
        request = GitHubRequest({"max_attempts": 3, "headers": {"authorization": "token x"}})
        repo = await request.get("https://api.github.com/repos/microsoft/ghcrawler")
        events = await request.get_all("https://api.github.com/orgs/microsoft/events")
        for record in request.activity:
            print(record.url, record.attempts)

    One instance may serve concurrent fetches; they share only the
    activity log, to which each page appends its own record.
    """

    def __init__(
        self,
        options: FetchOptions | Mapping[str, Any] | None = None,
        *,
        transport: Transport | None = None,
        rate_tracker: RateLimitTracker | None = None,
    ) -> None:
        """Initialize the request.

        Args:
            options: Overrides merged onto the defaults from settings.
            transport: Transport issuing the GETs. Defaults to a githubkit
                       transport with its own retrying turned off.
            rate_tracker: Optional tracker fed with every response's
                          rate limit headers.

        Raises:
            pydantic.ValidationError: If an option is out of range.
        """
        self._options = merge_options(FetchOptions.from_settings(), options)
        self._transport: Transport = transport or GitHubKitTransport()
        self._rate_tracker = rate_tracker
        self._activity = ActivityLog()

    @property
    def options(self) -> FetchOptions:
        return self._options

    @property
    def activity(self) -> ActivityLog:
        """One record per page fetched by this instance, in completion order."""
        return self._activity

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def rate_tracker(self) -> RateLimitTracker | None:
        return self._rate_tracker

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------
    async def get(self, url: str) -> Any:
        """Fetch a single page without following pagination.

        Returns:
            The parsed body of the first successful attempt.

        Raises:
            GitHubExhaustedRetriesError: If every attempt failed retryably.
            GitHubClientError: On a non-retryable status (401, 404, ...).
        """
        page = await self.fetch_page(url)
        return page.body

    async def get_all(self, url: str) -> Any:
        """Fetch every page of a resource and concatenate their items.

        ``per_page`` is added to every URL that has none, the ``next`` links
        included. A single-page resource whose body is not a list is
        returned as is.

        Raises:
            GitHubExhaustedRetriesError: If some page ran out of attempts.
            GitHubClientError: If some page failed non-retryably.
            Nothing from earlier pages is returned in either case.
        """
        pages: list[PageResult] = []
        page_url: str | None = url
        while page_url is not None:
            page = await self.fetch_page(self._with_page_size(page_url))
            pages.append(page)
            page_url = page.next_url

        if len(pages) == 1 and not isinstance(pages[0].body, list):
            return pages[0].body

        items: list[Any] = []
        for page in pages:
            items.extend(page.items)
        return items

    async def fetch_page(self, url: str) -> PageResult:
        """Fetch one page, retrying per the options, and record its activity."""
        log = bind_url(url)
        attempts = 0
        delays: list[Delay] = []

        while True:
            attempts += 1
            status: int | None = None
            try:
                response = await self._transport.get(url, headers=self._options.headers)
            except GitHubNetworkError as e:
                error: GitHubClientError = e
            else:
                status = response.status_code
                self._track_rate_limit(response)
                if response.is_success:
                    self._record(url, attempts, delays, status)
                    page = PageResult.from_response(url, response)
                    log.debug(
                        "Delivered page after {} attempt(s); rate limit remaining: {}",
                        attempts,
                        page.rate_remaining if page.rate_remaining is not None else "unknown",
                    )
                    return page
                error = self._error_for(url, response)

            if not isinstance(error, GitHubRetryableError):
                self._record(url, attempts, delays, status, error)
                log.error("Giving up on non-retryable status {}", status)
                raise error

            if attempts >= self._options.max_attempts:
                exhausted = GitHubExhaustedRetriesError(url, attempts, error)
                self._record(url, attempts, delays, status, exhausted)
                log.error("Exhausted {} attempt(s): {}", attempts, error)
                raise exhausted from error

            delay = self._delay_for(error)
            delays.append(delay)
            log.warning(
                "Attempt {}/{} failed ({}); waiting {} ms ({})",
                attempts,
                self._options.max_attempts,
                error,
                delay.ms,
                delay.kind.value,
            )
            await asyncio.sleep(delay.ms / 1000)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------
    def _with_page_size(self, url: str) -> str:
        parsed = httpx.URL(url)
        if PER_PAGE_PARAM in parsed.params:
            return url
        return str(parsed.copy_add_param(PER_PAGE_PARAM, str(self._options.per_page)))

    def _delay_for(self, error: GitHubRetryableError) -> Delay:
        if isinstance(error, GitHubRateLimitError):
            return Delay(DelayKind.FORBIDDEN, self._options.forbidden_delay)
        return Delay(DelayKind.RETRY, self._options.retry_delay)

    def _error_for(self, url: str, response: TransportResponse) -> GitHubClientError:
        """Classify a non-2xx response."""
        status = response.status_code
        body = response.body

        if status >= 500:
            return GitHubServerError(
                f"GitHub server error ({status})", url=url, status_code=status, body=body
            )
        if status == 403:
            reset_at = self._reset_at(response)
            if reset_at is not None:
                logger.warning("GitHub rate limit exhausted; resets at {}", reset_at.isoformat())
            return GitHubRateLimitError(
                "GitHub access forbidden (403)", url=url, body=body, reset_at=reset_at
            )
        if status == 401:
            return GitHubAuthenticationError(
                "Invalid GitHub credentials", url=url, status_code=status, body=body
            )
        if status == 404:
            return GitHubNotFoundError(f"Not found: {url}", url=url, status_code=status, body=body)
        return GitHubClientError(
            f"GitHub API error ({status})", url=url, status_code=status, body=body
        )

    @staticmethod
    def _reset_at(response: TransportResponse) -> datetime | None:
        """Reset time when the 403 comes from an exhausted quota."""
        headers = response.headers
        if headers.get("x-ratelimit-remaining") != "0":
            return None
        reset = headers.get("x-ratelimit-reset", "")
        if not reset.isdigit():
            return None
        return datetime.fromtimestamp(int(reset), tz=UTC)

    def _track_rate_limit(self, response: TransportResponse) -> None:
        if self._rate_tracker is not None:
            self._rate_tracker.update_from_headers(response.headers)

    def _record(
        self,
        url: str,
        attempts: int,
        delays: list[Delay],
        status: int | None,
        error: Exception | None = None,
    ) -> None:
        self._activity.append(
            ActivityRecord(
                url=url,
                attempts=attempts,
                delays=tuple(delays),
                status=status,
                error=str(error) if error is not None else None,
            )
        )
