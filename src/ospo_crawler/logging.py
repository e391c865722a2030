"""Loguru setup for the crawler.

Every record carries a ``name`` extra: the module for package loggers,
``fetch`` (plus the ``url``) for per-page retry messages, and the stdlib
logger name for intercepted httpx/githubkit output.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_CONSOLE_FORMAT = (
    "<dim>{time:HH:mm:ss}</dim> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - "
    "<level>{message}</level>"
)
_FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{extra[name]}:{function}:{line} | {extra} | {message}"
)
_HTTP_LOGGERS = ("httpx", "httpcore", "githubkit")


class InterceptHandler(logging.Handler):
    """Forward stdlib records (httpx, githubkit) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        from types import FrameType

        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = str(record.levelno)

        # Skip logging's own frames so loguru reports the real caller
        frame: FrameType | None = logging.currentframe()
        depth = 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.bind(name=record.name).opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _resolve_level(level: LogLevel, verbose: bool, quiet: bool) -> LogLevel:
    if verbose:
        return "DEBUG"
    if quiet:
        return "WARNING"
    return level


def setup_logging(
    level: LogLevel = "INFO",
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    serialize: bool = False,
) -> Logger:
    """Replace loguru's sinks with a stderr sink and an optional log file.

    ``verbose`` forces DEBUG and wins over ``quiet``, which forces WARNING.
    The file sink, when given, always records DEBUG and is rotated with
    ``rotation``/``retention``; ``serialize`` writes it as JSON lines.
    HTTP library chatter is held at WARNING unless running at DEBUG.
    """
    effective_level = _resolve_level(level, verbose, quiet)

    logger.remove()
    logger.configure(extra={"name": "ospo_crawler"})
    logger.add(
        sys.stderr,
        level=effective_level,
        format=_CONSOLE_FORMAT,
        colorize=True,
        backtrace=True,
        diagnose=True,
    )
    if log_file:
        logger.add(
            log_file,
            level="DEBUG",
            format=_FILE_FORMAT,
            rotation=rotation,
            retention=retention,
            compression="gz",
            serialize=serialize,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    http_level = logging.DEBUG if effective_level in ("TRACE", "DEBUG") else logging.WARNING
    for name in _HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level)

    return logger


def get_logger(name: str) -> Logger:
    """Logger with ``name`` bound, for module-level use: ``get_logger(__name__)``."""
    return logger.bind(name=name)


def bind_url(url: str, **context: Any) -> Logger:
    """Bind a request URL (and any extra context) to the fetch logger."""
    return logger.bind(name="fetch", url=url, **context)
