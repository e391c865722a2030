"""Pytest configuration and shared fixtures.

Usage Guide:
- For fetcher tests: use the ``make_request`` factory with a list of outcomes
  built by tests.fixtures (make_response, make_page, make_error)
- Delays are kept in the tens of milliseconds so retry tests run fast
"""

from collections.abc import Callable, Iterator
from typing import Any

import pytest

from ospo_crawler.config import get_settings
from ospo_crawler.github import GitHubRequest
from tests.fixtures import ScriptedTransport

# Short delays mirroring production ratios (forbidden waits longer than retry)
TEST_RETRY_DELAY = 10
TEST_FORBIDDEN_DELAY = 15


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep the developer's environment out of default options."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


RequestFactory = Callable[..., tuple[GitHubRequest, ScriptedTransport]]


@pytest.fixture
def make_request() -> RequestFactory:
    """Build a GitHubRequest wired to a ScriptedTransport.

    Usage:
        request, transport = make_request([make_response({"id": 1})])
    """

    def _make(outcomes: list[Any], **overrides: Any) -> tuple[GitHubRequest, ScriptedTransport]:
        transport = ScriptedTransport(outcomes)
        options = {
            "retry_delay": TEST_RETRY_DELAY,
            "forbidden_delay": TEST_FORBIDDEN_DELAY,
            **overrides,
        }
        return GitHubRequest(options, transport=transport), transport

    return _make
