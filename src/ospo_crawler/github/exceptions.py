"""GitHub fetch exceptions."""

from datetime import datetime
from typing import Any


class GitHubClientError(Exception):
    """Base exception for GitHub fetch errors."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.body = body


class GitHubAuthenticationError(GitHubClientError):
    """Raised when authentication fails (401)."""

    pass


class GitHubNotFoundError(GitHubClientError):
    """Raised when a resource is not found (404)."""

    pass


class GitHubRetryableError(GitHubClientError):
    """Base class for failures the fetcher retries with a delay.

    These never reach the caller directly: once a page runs out of
    attempts the last one is wrapped in GitHubExhaustedRetriesError.
    """

    pass


class GitHubNetworkError(GitHubRetryableError):
    """Raised by a transport when no response was received."""

    pass


class GitHubServerError(GitHubRetryableError):
    """Raised for 5xx responses."""

    pass


class GitHubRateLimitError(GitHubRetryableError):
    """Raised for 403 responses (forbidden or rate limited)."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = 403,
        body: Any = None,
        reset_at: datetime | None = None,
    ) -> None:
        super().__init__(message, url=url, status_code=status_code, body=body)
        self.reset_at = reset_at


class GitHubExhaustedRetriesError(GitHubClientError):
    """Raised when a page is still failing after max_attempts.

    ``last_error`` is the precipitating retryable error and ``body`` the
    last response body (None when the last attempt got no response).
    """

    def __init__(self, url: str, attempts: int, last_error: GitHubRetryableError) -> None:
        super().__init__(
            f"Giving up on {url} after {attempts} attempt(s): {last_error}",
            url=url,
            status_code=last_error.status_code,
            body=last_error.body,
        )
        self.attempts = attempts
        self.last_error = last_error
