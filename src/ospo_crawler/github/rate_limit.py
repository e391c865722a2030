"""Passive rate limit tracking from GitHub response headers.

GitHub includes rate limit info in headers on every response:
- x-ratelimit-limit
- x-ratelimit-remaining
- x-ratelimit-used
- x-ratelimit-reset
- x-ratelimit-resource (pool name)

The tracker keeps the latest state per resource pool at zero API cost.
It informs logging and callers; the fetcher's backoff does not depend on it.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, Field, computed_field

from ospo_crawler.config import RateLimitConfig, get_settings
from ospo_crawler.logging import get_logger

logger = get_logger(__name__)

CORE = "core"


class RateLimitStatus(StrEnum):
    """Rate limit health status.

    Thresholds are configurable but defaults are:
    - HEALTHY: > 50% remaining
    - WARNING: 20-50% remaining
    - CRITICAL: 5-20% remaining
    - EXHAUSTED: 0 remaining
    """

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"
    EXHAUSTED = "exhausted"


class RateLimitState(BaseModel):
    """Quota state of one resource pool as of the last response."""

    resource: str = Field(default=CORE, description="Resource pool name")
    limit: int = Field(ge=0, description="Maximum requests allowed per window")
    remaining: int = Field(ge=0, description="Requests remaining in current window")
    used: int = Field(ge=0, description="Requests used in current window")
    reset_at: datetime = Field(description="UTC datetime when limit resets")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def remaining_percent(self) -> float:
        """Percentage of rate limit remaining (0.0 to 100.0)."""
        if self.limit == 0:
            return 0.0
        return (self.remaining / self.limit) * 100

    @property
    def seconds_until_reset(self) -> int:
        """Seconds until rate limit resets (0 if already past)."""
        delta = self.reset_at - datetime.now(UTC)
        return max(0, int(delta.total_seconds()))

    def get_status(self, config: RateLimitConfig) -> RateLimitStatus:
        if self.remaining == 0:
            return RateLimitStatus.EXHAUSTED
        if self.remaining_percent >= config.healthy_threshold_pct:
            return RateLimitStatus.HEALTHY
        if self.remaining_percent >= config.warning_threshold_pct:
            return RateLimitStatus.WARNING
        return RateLimitStatus.CRITICAL

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> Self | None:
        """Parse lower-cased response headers.

        Returns:
            The parsed state, or None when the response carries no
            x-ratelimit-remaining header.
        """
        remaining = headers.get("x-ratelimit-remaining")
        if remaining is None:
            return None

        try:
            remaining_count = int(remaining)
            limit = int(headers.get("x-ratelimit-limit", "5000"))
            used = int(headers.get("x-ratelimit-used", str(max(0, limit - remaining_count))))
            reset_ts = int(headers.get("x-ratelimit-reset", "0"))
        except ValueError:
            logger.debug("Ignoring malformed rate limit headers: {}", dict(headers))
            return None

        reset_at = datetime.fromtimestamp(reset_ts, tz=UTC) if reset_ts > 0 else datetime.now(UTC)
        return cls(
            resource=headers.get("x-ratelimit-resource", CORE),
            limit=limit,
            remaining=remaining_count,
            used=used,
            reset_at=reset_at,
        )


class RateLimitTracker:
    """Latest rate limit state per resource pool.

    Usage:
        tracker = RateLimitTracker()
        request = GitHubRequest(rate_tracker=tracker)
        await request.get_all(url)
        if tracker.get_status() is RateLimitStatus.CRITICAL:
            ...
    """

    def __init__(self, config: RateLimitConfig | None = None) -> None:
        self._config = config or get_settings().rate_limit
        self._states: dict[str, RateLimitState] = {}

    def update_from_headers(self, headers: Mapping[str, str]) -> RateLimitState | None:
        """Record the state carried by a response, if any."""
        if not self._config.track_from_headers:
            return None

        state = RateLimitState.from_headers(headers)
        if state is None:
            return None

        previous = self._states.get(state.resource)
        self._states[state.resource] = state
        current_status = state.get_status(self._config)
        if previous is not None and previous.get_status(self._config) != current_status:
            logger.info(
                "Rate limit for {} is now {} ({}/{} remaining)",
                state.resource,
                current_status.value,
                state.remaining,
                state.limit,
            )
        return state

    def state(self, resource: str = CORE) -> RateLimitState | None:
        return self._states.get(resource)

    def get_status(self, resource: str = CORE) -> RateLimitStatus:
        """Health status for a pool (HEALTHY if unknown)."""
        state = self._states.get(resource)
        if state is None:
            return RateLimitStatus.HEALTHY
        return state.get_status(self._config)

    def can_make_request(self, count: int = 1, resource: str = CORE) -> bool:
        """True if remaining >= count + the configured buffer (or unknown)."""
        state = self._states.get(resource)
        if state is None:
            return True
        return state.remaining >= count + self._config.min_remaining_buffer

    def seconds_until_reset(self, resource: str = CORE) -> int:
        state = self._states.get(resource)
        return state.seconds_until_reset if state else 0

    def to_dict(self) -> dict[str, Any]:
        """Export current state as dictionary (for logging/CLI)."""
        return {
            resource: {
                "limit": state.limit,
                "remaining": state.remaining,
                "used": state.used,
                "remaining_percent": round(state.remaining_percent, 2),
                "reset_at": state.reset_at.isoformat(),
                "seconds_until_reset": state.seconds_until_reset,
                "status": state.get_status(self._config).value,
            }
            for resource, state in self._states.items()
        }
