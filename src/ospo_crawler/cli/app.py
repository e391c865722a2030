"""Main CLI application for ospo-crawler."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from ospo_crawler import __version__
from ospo_crawler.cli import fetch as fetch_cmd
from ospo_crawler.config import get_settings
from ospo_crawler.logging import setup_logging

app = typer.Typer(
    name="ospo-crawler",
    help="GitHub crawler fetch layer with pagination and retry orchestration.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"ospo-crawler version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-error output (WARNING level).",
        ),
    ] = False,
) -> None:
    """ospo-crawler - fetch GitHub resources the way the crawler does."""
    settings = get_settings()
    log_config = settings.logging

    setup_logging(
        level=settings.log_level,
        verbose=verbose,
        quiet=quiet,
        log_file=Path(log_config.log_file) if log_config.log_file else None,
        rotation=log_config.rotation,
        retention=log_config.retention,
        serialize=log_config.serialize,
    )


app.command("fetch")(fetch_cmd.fetch)
app.command("baseline")(fetch_cmd.baseline)


if __name__ == "__main__":
    app()
