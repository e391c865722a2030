"""Per-page activity records.

Every logical page request leaves exactly one ActivityRecord behind: how
many attempts it took and which backoff preceded each retry. Records are
appended once the page settles and never change afterwards.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, overload


class DelayKind(StrEnum):
    """Which backoff policy was applied before a retry."""

    RETRY = "retry"
    """Server error or network failure."""

    FORBIDDEN = "forbidden"
    """403 forbidden / rate limited."""


@dataclass(frozen=True)
class Delay:
    """One backoff applied before a retry, in milliseconds."""

    kind: DelayKind
    ms: int

    @property
    def retry(self) -> int | None:
        return self.ms if self.kind is DelayKind.RETRY else None

    @property
    def forbidden(self) -> int | None:
        return self.ms if self.kind is DelayKind.FORBIDDEN else None

    def to_dict(self) -> dict[str, int]:
        return {self.kind.value: self.ms}


@dataclass(frozen=True)
class ActivityRecord:
    """Diagnostic trace of one page request."""

    url: str
    """URL of the page as requested."""

    attempts: int
    """Attempts made, counting the first one."""

    delays: tuple[Delay, ...] = ()
    """Backoffs in the order they were applied; always attempts - 1 long."""

    status: int | None = None
    """Last HTTP status seen (None when the last attempt got no response)."""

    error: str | None = None
    """Terminal error message when the page was not delivered."""

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        ``delays`` is left out entirely when the first attempt settled the page.
        """
        result: dict[str, Any] = {
            "url": self.url,
            "attempts": self.attempts,
            "status": self.status,
        }
        if self.delays:
            result["delays"] = [delay.to_dict() for delay in self.delays]
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass
class ActivityLog:
    """Ordered, append-only collection of ActivityRecords.

    Appends are plain synchronous calls on the event loop, so concurrent
    fetches sharing one GitHubRequest each add whole records.
    """

    _records: list[ActivityRecord] = field(default_factory=list)

    def append(self, record: ActivityRecord) -> None:
        self._records.append(record)

    @overload
    def __getitem__(self, index: int) -> ActivityRecord: ...

    @overload
    def __getitem__(self, index: slice) -> list[ActivityRecord]: ...

    def __getitem__(self, index: int | slice) -> ActivityRecord | list[ActivityRecord]:
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ActivityRecord]:
        return iter(list(self._records))

    def to_list(self) -> list[dict[str, Any]]:
        return [record.to_dict() for record in self._records]
