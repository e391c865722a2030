"""Network baseline measurement against the GitHub API.

The crawler's compute limiter subtracts a baseline round-trip time from each
fetch. The baseline is the mean latency of a few staggered calls to the free
``/rate_limit`` endpoint.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping

from ospo_crawler.logging import get_logger

from .exceptions import GitHubNetworkError
from .transport import Transport

logger = get_logger(__name__)

RATE_LIMIT_URL = "https://api.github.com/rate_limit"


async def measure_request_baseline(
    transport: Transport,
    url: str = RATE_LIMIT_URL,
    *,
    samples: int = 4,
    stagger_ms: int = 50,
    headers: Mapping[str, str] | None = None,
) -> int:
    """Return the floor of the mean elapsed ms over successful samples.

    Sample ``n`` starts ``n * stagger_ms`` after the first. Any HTTP
    response counts as a sample; only network failures are dropped.

    Raises:
        ValueError: If samples < 1.
        GitHubNetworkError: If no sample got a response.
    """
    if samples < 1:
        raise ValueError("samples must be >= 1")

    request_headers = dict(headers or {"User-Agent": "ospo-crawler"})

    async def _sample(index: int) -> float:
        await asyncio.sleep(index * stagger_ms / 1000)
        response = await transport.get(url, headers=request_headers)
        return response.elapsed_ms

    outcomes = await asyncio.gather(
        *(_sample(index) for index in range(samples)), return_exceptions=True
    )
    times: list[float] = []
    for outcome in outcomes:
        if isinstance(outcome, GitHubNetworkError):
            logger.debug("Baseline sample failed: {}", outcome)
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            times.append(outcome)

    if not times:
        raise GitHubNetworkError(f"All {samples} baseline samples to {url} failed", url=url)

    baseline = int(sum(times) // len(times))
    logger.info("New GitHub request baseline: {} ms", baseline)
    return baseline
