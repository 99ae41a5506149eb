"""Logging for courier.

courier logs through loguru but stays silent inside host applications:
records from the ``courier`` package are disabled at import time and only
emitted after an explicit ``configure_logging()`` (the CLI does this) or a
``logger.enable("courier")`` from the host. Library code never adds or
removes sinks on its own.

Usage:
    from courier.util.log import configure_logging, get_logger

    configure_logging(log_dir="logs", level="DEBUG")
    log = get_logger("Request")
    log.debug("Sending request: {url}", url=url)
"""

from __future__ import annotations

import contextlib
import logging
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from loguru import logger as _logger

PACKAGE = "courier"

SENSITIVE_HEADERS = frozenset(
    {"authorization", "cookie", "proxy-authorization", "set-cookie", "x-api-key"}
)
REDACTED = "***"
TRUNCATE_LIMIT = 2000

_HANDLER_IDS: list[int] = []

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[logger_name]}</cyan> - "
    "<level>{message}</level>"
)

_logger.disable(PACKAGE)


class _InterceptHandler(logging.Handler):
    """Forward stdlib records (httpx, httpcore) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = _logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        _logger.opt(depth=depth, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def configure_logging(
    *,
    log_dir: str | Path | None = None,
    level: str = "INFO",
    to_console: bool = True,
    to_file: bool = False,
    rotation: str = "10 MB",
    retention: str = "7 days",
    intercept_std_logging: bool = False,
) -> None:
    """Route courier logs to stderr and/or a rotating file and enable them.

    This is the application-side switch; calling it again replaces the sinks
    added by the previous call.

    Args:
        log_dir: Directory for ``courier_YYYYMMDD.log`` files (default ``./logs``).
        level: Minimum level for the sinks.
        to_console: Log to stderr so stdout stays free for response bodies.
        to_file: Log to a rotating file.
        rotation: loguru rotation policy.
        retention: loguru retention policy.
        intercept_std_logging: Also route stdlib logging (httpx, httpcore).
    """
    shutdown_logging()

    # loguru's built-in DEBUG stderr sink would duplicate the console sink
    with contextlib.suppress(ValueError):
        _logger.remove(0)
    _logger.configure(extra={"logger_name": "-"})

    if to_console:
        _HANDLER_IDS.append(_logger.add(sys.stderr, level=level, format=_FORMAT))

    if to_file:
        directory = Path(log_dir) if log_dir is not None else Path.cwd() / "logs"
        directory.mkdir(parents=True, exist_ok=True)
        _HANDLER_IDS.append(
            _logger.add(
                str(directory / f"{PACKAGE}_{{time:YYYYMMDD}}.log"),
                level=level,
                format=_FORMAT,
                rotation=rotation,
                retention=retention,
                encoding="utf-8",
            )
        )

    if intercept_std_logging:
        logging.root.handlers = [_InterceptHandler()]
        logging.root.setLevel(level)
        for name in ("httpx", "httpcore"):
            logging.getLogger(name).handlers = []
            logging.getLogger(name).propagate = True

    _logger.enable(PACKAGE)


def get_logger(logger_name: str | None = None, /, **extra: Any):
    """Return the loguru logger bound with ``logger_name`` and extra fields."""
    return _logger.bind(logger_name=logger_name or PACKAGE, **extra)


def shutdown_logging() -> None:
    """Remove the sinks added by ``configure_logging`` and silence courier again."""
    for handler_id in _HANDLER_IDS:
        with contextlib.suppress(ValueError):
            _logger.remove(handler_id)
    _HANDLER_IDS.clear()
    _logger.disable(PACKAGE)


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Copy of ``headers`` with credential values masked."""
    return {
        key: REDACTED if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


def truncate(value: str, *, limit: int = TRUNCATE_LIMIT) -> str:
    if len(value) <= limit:
        return value
    return f"{value[:limit]}…(truncated {len(value) - limit} chars)"
