"""Fetch options and their merge rules.

Options are built once per fetcher: settings supply the defaults and the
caller's overrides are laid over them with ``merge_options``. The result is
a new frozen value; nothing shared is mutated.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ospo_crawler.config import Settings, get_settings

GITHUB_MEDIA_TYPE = "application/vnd.github+json"

# camelCase spellings accepted for crawler configs written that way
CAMEL_CASE_OPTIONS = {
    "retryDelay": "retry_delay",
    "forbiddenDelay": "forbidden_delay",
    "maxAttempts": "max_attempts",
    "perPage": "per_page",
}


class FetchOptions(BaseModel):
    """Immutable configuration of a GitHubRequest.

    Keys other than the declared fields are kept as extra options and are
    readable as attributes, so callers can carry their own settings along.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    retry_delay: int = Field(
        default=1000,
        ge=0,
        validation_alias=AliasChoices("retry_delay", "retryDelay"),
        description="ms before retrying 5xx/network",
    )
    forbidden_delay: int = Field(
        default=180000,
        ge=0,
        validation_alias=AliasChoices("forbidden_delay", "forbiddenDelay"),
        description="ms to wait after a 403",
    )
    max_attempts: int = Field(
        default=5,
        ge=1,
        validation_alias=AliasChoices("max_attempts", "maxAttempts"),
        description="attempt ceiling per page",
    )
    per_page: int = Field(
        default=100,
        ge=1,
        le=100,
        validation_alias=AliasChoices("per_page", "perPage"),
        description="page size for get_all",
    )
    headers: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> FetchOptions:
        """Build the default options from application settings."""
        settings = settings or get_settings()
        fetch = settings.fetch
        headers = {
            "User-Agent": fetch.user_agent,
            "Accept": GITHUB_MEDIA_TYPE,
        }
        if settings.github_token:
            headers["Authorization"] = f"token {settings.github_token}"
        return cls(
            retry_delay=fetch.retry_delay_ms,
            forbidden_delay=fetch.forbidden_delay_ms,
            max_attempts=fetch.max_attempts,
            per_page=fetch.per_page,
            headers=headers,
        )


def merge_headers(base: Mapping[str, str], overrides: Mapping[str, str]) -> dict[str, str]:
    """Overlay ``overrides`` on ``base``; names compare case-insensitively.

    The caller's spelling of a header name is the one kept.
    """
    overridden = {name.lower() for name in overrides}
    merged = {name: value for name, value in base.items() if name.lower() not in overridden}
    merged.update(overrides)
    return merged


def merge_options(
    base: FetchOptions,
    overrides: FetchOptions | Mapping[str, Any] | None = None,
) -> FetchOptions:
    """Return ``base`` with ``overrides`` applied.

    Top-level keys replace the base value; ``headers`` are merged so the
    override wins on conflict. camelCase option names are folded onto their
    fields and extra keys pass through. A FetchOptions override contributes
    only the fields that were set explicitly on it.

    Raises:
        pydantic.ValidationError: If an override is out of range.
    """
    if overrides is None:
        return base
    if isinstance(overrides, FetchOptions):
        overrides = {
            **overrides.model_dump(exclude_unset=True),
            **(overrides.model_extra or {}),
        }

    values = base.model_dump()
    for key, value in overrides.items():
        key = CAMEL_CASE_OPTIONS.get(key, key)
        if key == "headers":
            values["headers"] = merge_headers(base.headers, value or {})
        else:
            values[key] = value
    return FetchOptions.model_validate(values)
