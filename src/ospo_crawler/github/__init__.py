"""GitHub fetch layer.

This module provides:
- GitHubRequest: paginated GETs with retry and backoff orchestration
- Options: FetchOptions, merge_options
- Activity records: ActivityLog, ActivityRecord, Delay, DelayKind
- Transports: Transport, TransportResponse, GitHubKitTransport
- Rate limit tracking: RateLimitTracker, RateLimitState, RateLimitStatus
- Baseline measurement: measure_request_baseline
"""

from .activity import ActivityLog, ActivityRecord, Delay, DelayKind
from .baseline import RATE_LIMIT_URL, measure_request_baseline
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
from .links import next_page_url, parse_link_header
from .options import FetchOptions, merge_headers, merge_options
from .page import PageResult
from .rate_limit import RateLimitState, RateLimitStatus, RateLimitTracker
from .request import GitHubRequest
from .transport import GitHubKitTransport, Transport, TransportResponse

__all__ = [
    # Fetcher
    "GitHubRequest",
    "PageResult",
    # Options
    "FetchOptions",
    "merge_headers",
    "merge_options",
    # Activity
    "ActivityLog",
    "ActivityRecord",
    "Delay",
    "DelayKind",
    # Exceptions
    "GitHubAuthenticationError",
    "GitHubClientError",
    "GitHubExhaustedRetriesError",
    "GitHubNetworkError",
    "GitHubNotFoundError",
    "GitHubRateLimitError",
    "GitHubRetryableError",
    "GitHubServerError",
    # Links
    "next_page_url",
    "parse_link_header",
    # Transport
    "GitHubKitTransport",
    "Transport",
    "TransportResponse",
    # Rate limit tracking
    "RateLimitState",
    "RateLimitStatus",
    "RateLimitTracker",
    # Baseline
    "RATE_LIMIT_URL",
    "measure_request_baseline",
]
