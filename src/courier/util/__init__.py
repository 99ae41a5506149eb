"""Utilities for courier."""

from courier.util.log import (
    configure_logging,
    get_logger,
    redact_headers,
    shutdown_logging,
    truncate,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "shutdown_logging",
    "redact_headers",
    "truncate",
]
