"""Structured logging configuration for graphtext.

Events go through structlog into stdlib logging, where two handlers render
them: a rich console handler filtered by verbosity, and an optional file
handler that writes every event as one JSON object per line.
"""

from __future__ import annotations

import logging
from pathlib import Path  # noqa: TC003 - Used at runtime for path operations
from typing import TYPE_CHECKING

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from structlog.typing import Processor

_file_handler: logging.FileHandler | None = None
_log_file: Path | None = None

_SHARED_PROCESSORS: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _formatter(renderer: Processor) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        foreign_pre_chain=_SHARED_PROCESSORS,
    )


def configure_logging(verbosity: int = 0, log_file: Path | None = None) -> None:
    """Configure logging for graphtext.

    Args:
        verbosity: 0=WARNING (default), 1=INFO, 2+=DEBUG
        log_file: If given, every event is also appended to this JSONL file.
    """
    close_file_logging()

    levels = {0: logging.WARNING, 1: logging.INFO}
    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_time=False,
        show_level=False,
        show_path=verbosity >= 2,
        markup=False,
        level=levels.get(verbosity, logging.DEBUG),
    )
    console_handler.setFormatter(_formatter(structlog.dev.ConsoleRenderer(colors=False)))
    handlers: list[logging.Handler] = [console_handler]

    if log_file is not None:
        handlers.append(_open_file_logging(log_file))

    root_level = logging.DEBUG if (verbosity > 0 or log_file is not None) else logging.WARNING
    logging.basicConfig(level=root_level, handlers=handlers, force=True)

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        cache_logger_on_first_use=False,
    )


def _open_file_logging(log_file: Path) -> logging.FileHandler:
    global _file_handler, _log_file
    log_file.parent.mkdir(parents=True, exist_ok=True)
    _file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    _file_handler.setLevel(logging.DEBUG)
    _file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer(default=str)))
    _log_file = log_file
    return _file_handler


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Get a structured logger, configuring default logging on first use.

    Args:
        name: Logger name (typically __name__).
    """
    if not structlog.is_configured():
        configure_logging()

    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger(name)
    return logger


def get_log_file() -> Path | None:
    """Return the JSONL log file path, or None if file logging is off."""
    return _log_file


def close_file_logging() -> None:
    """Close the JSONL file handler, if any."""
    global _file_handler, _log_file
    if _file_handler is not None:
        logging.getLogger().removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None
        _log_file = None
