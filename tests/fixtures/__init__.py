"""Test fixtures for ospo-crawler."""

from .github_responses import (
    URL_HOST,
    ScriptedTransport,
    make_error,
    make_link_header,
    make_page,
    make_response,
)
from .rate_limit_responses import (
    HEADERS_CRITICAL,
    HEADERS_EXHAUSTED,
    HEADERS_HEALTHY,
    HEADERS_WARNING,
    future_reset_timestamp,
    make_rate_limit_headers,
)

__all__ = [
    # Scripted transport and responses
    "URL_HOST",
    "ScriptedTransport",
    "make_error",
    "make_link_header",
    "make_page",
    "make_response",
    # Rate limit headers
    "HEADERS_CRITICAL",
    "HEADERS_EXHAUSTED",
    "HEADERS_HEALTHY",
    "HEADERS_WARNING",
    "future_reset_timestamp",
    "make_rate_limit_headers",
]
