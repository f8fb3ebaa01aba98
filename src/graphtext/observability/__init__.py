"""Observability module for graphtext.

Provides structured logging via structlog with rich console output.
"""

from graphtext.observability.logging import (
    close_file_logging,
    configure_logging,
    get_log_file,
    get_logger,
)

__all__ = [
    "close_file_logging",
    "configure_logging",
    "get_log_file",
    "get_logger",
]
