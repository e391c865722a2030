"""Typed view of one delivered page."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .links import NEXT, parse_link_header
from .transport import TransportResponse


@dataclass(frozen=True)
class PageResult:
    """Parsed body of a successful page plus its pagination links."""

    url: str
    status_code: int
    body: Any
    links: dict[str, str] = field(default_factory=dict)
    rate_remaining: int | None = None

    @classmethod
    def from_response(cls, url: str, response: TransportResponse) -> PageResult:
        remaining = response.headers.get("x-ratelimit-remaining")
        return cls(
            url=url,
            status_code=response.status_code,
            body=response.body,
            links=parse_link_header(response.headers.get("link")),
            rate_remaining=int(remaining) if remaining and remaining.isdigit() else None,
        )

    @property
    def next_url(self) -> str | None:
        return self.links.get(NEXT)

    @property
    def items(self) -> list[Any]:
        """Body as a list of items, for concatenation across pages."""
        if isinstance(self.body, list):
            return self.body
        return [self.body]
