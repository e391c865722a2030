"""Fetch commands: one-off GETs through the retrying fetcher."""

from __future__ import annotations

import json
from typing import Annotated, Any

import typer
from rich.table import Table

from ospo_crawler.cli.common import (
    OutputFormat,
    OutputFormatOption,
    console,
    run_async_command,
)
from ospo_crawler.github import (
    RATE_LIMIT_URL,
    ActivityLog,
    GitHubKitTransport,
    GitHubRequest,
    RateLimitTracker,
    measure_request_baseline,
)


def _overrides(
    max_attempts: int | None,
    retry_delay: int | None,
    forbidden_delay: int | None,
) -> dict[str, Any]:
    values = {
        "max_attempts": max_attempts,
        "retry_delay": retry_delay,
        "forbidden_delay": forbidden_delay,
    }
    return {key: value for key, value in values.items() if value is not None}


def _activity_table(activity: ActivityLog) -> Table:
    table = Table(title="Activity")
    table.add_column("#", style="dim")
    table.add_column("URL", overflow="fold")
    table.add_column("Status")
    table.add_column("Attempts", justify="right")
    table.add_column("Delays")

    for index, record in enumerate(activity, start=1):
        delays = ", ".join(f"{d.kind.value} {d.ms}ms" for d in record.delays) or "-"
        status = str(record.status) if record.status is not None else "no response"
        style = None if record.succeeded else "red"
        table.add_row(str(index), record.url, status, str(record.attempts), delays, style=style)
    return table


def fetch(
    url: Annotated[str, typer.Argument(help="Absolute GitHub API URL")],
    all_pages: Annotated[
        bool,
        typer.Option("--all", "-a", help="Follow pagination and concatenate all pages"),
    ] = False,
    max_attempts: Annotated[
        int | None, typer.Option("--max-attempts", min=1, help="Attempts per page")
    ] = None,
    retry_delay: Annotated[
        int | None, typer.Option("--retry-delay", min=0, help="ms before retrying 5xx/network")
    ] = None,
    forbidden_delay: Annotated[
        int | None, typer.Option("--forbidden-delay", min=0, help="ms to wait after a 403")
    ] = None,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Fetch a GitHub resource with retries and print it.

    Examples:
        ospo-crawler fetch https://api.github.com/repos/microsoft/ghcrawler
        ospo-crawler fetch --all https://api.github.com/orgs/microsoft/repos -f json
    """

    async def _fetch() -> tuple[Any, GitHubRequest]:
        async with GitHubKitTransport() as transport:
            request = GitHubRequest(
                _overrides(max_attempts, retry_delay, forbidden_delay),
                transport=transport,
                rate_tracker=RateLimitTracker(),
            )
            if all_pages:
                return await request.get_all(url), request
            return await request.get(url), request

    result, request = run_async_command(_fetch(), error_prefix="Fetch failed")

    if output_format == OutputFormat.JSON:
        document = {
            "result": result,
            "activity": request.activity.to_list(),
            "rate_limit": request.rate_tracker.to_dict() if request.rate_tracker else {},
        }
        console.print_json(json.dumps(document, default=str))
        return

    console.print_json(json.dumps(result, default=str))
    console.print(_activity_table(request.activity))
    if isinstance(result, list):
        console.print(f"[bold]{len(result)}[/bold] item(s)")


def baseline(
    samples: Annotated[int, typer.Option("--samples", "-n", min=1, help="Number of calls")] = 4,
    url: Annotated[str, typer.Option("--url", help="Endpoint to time")] = RATE_LIMIT_URL,
) -> None:
    """Measure the mean round trip to the GitHub API in milliseconds."""

    async def _measure() -> int:
        async with GitHubKitTransport() as transport:
            headers = GitHubRequest(transport=transport).options.headers
            return await measure_request_baseline(
                transport, url, samples=samples, headers=headers
            )

    result = run_async_command(_measure(), error_prefix="Baseline failed")
    console.print(f"GitHub request baseline: [bold]{result}[/bold] ms")
