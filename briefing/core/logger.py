"""Structured logging for the briefing engine (structlog over stdlib logging)."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import structlog

# Loggers of HTTP and scheduler libraries only log at WARNING and above.
_QUIET_LOGGERS = ("httpx", "httpcore", "urllib3", "anthropic", "apscheduler", "feedparser")

# Oracle and enrichment errors can carry whole model replies.
MAX_VALUE_CHARS = 500


def _clip_long_values(
    _logger: Any,
    _method: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    for key, value in event_dict.items():
        if key != "event" and isinstance(value, str) and len(value) > MAX_VALUE_CHARS:
            event_dict[key] = value[:MAX_VALUE_CHARS] + "..."
    return event_dict


def _build_handlers(level: int, log_file: str | Path | None) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(path), encoding="utf-8")
        file_handler.setLevel(level)
        handlers.append(file_handler)
    return handlers


def _build_renderer(format: str) -> structlog.types.Processor:
    if format == "console":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer(ensure_ascii=False)


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    log_file: str | Path | None = None,
) -> None:
    """Route structlog events through stdlib handlers.

    Args:
        level: Log level name; unknown names fall back to INFO.
        format: "json" (one object per line, for the scheduled daemon) or
            "console" (coloured, for interactive runs).
        log_file: Optional file that receives the same lines as stdout.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        handlers=_build_handlers(log_level, log_file),
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _clip_long_values,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _build_renderer(format),
        ],
    )
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def get_logger(name: str, **bindings: Any) -> structlog.stdlib.BoundLogger:
    """Logger for ``name`` with optional bound key/value context."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    if bindings:
        logger = logger.bind(**bindings)
    return logger


def bind_run_context(**context: Any) -> None:
    """Replace the per-run context (``run_id``, workflow name) on all events.

    Uses ``structlog.contextvars``, so a scheduler thread running the next
    pass starts from a clean context.
    """
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**context)
