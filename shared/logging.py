"""
Centralized structured logging for the verification service.

Provides:
- setup_logging(): configure stdlib logging + structlog from LoggingSettings
- get_logger(): get a configured logger instance

Production uses JSON output, development a pretty console renderer.
Sensitive keys (passwords, tokens, one-time codes) are redacted before
rendering.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Optional

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import EventDict, Processor

# Sensitive fields to redact from logs
REDACTED_FIELDS = {
    "password",
    "token",
    "api_key",
    "authorization",
    "cookie",
    "secret",
    "key",
    "code",
    "otp_code",
    "submitted_code",
}

_SENSITIVE_FRAGMENTS = ("password", "token", "secret", "otp")
_PRESERVED_KEYS = {"level", "event", "timestamp", "logger"}


def add_timestamp(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add ISO format timestamp to event dict."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Redact sensitive fields from logs."""
    for key in list(event_dict.keys()):
        if key in _PRESERVED_KEYS:
            continue
        lowered = key.lower()
        if lowered in REDACTED_FIELDS or any(
            fragment in lowered for fragment in _SENSITIVE_FRAGMENTS
        ):
            event_dict[key] = "***REDACTED***"
    return event_dict


def configure_structlog(log_format: str = "console") -> None:
    """
    Configure structlog with appropriate processors for the environment.

    json: one JSON object per line, for log shipping
    console: pretty coloured output for local development
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        redact_sensitive_fields,
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            pad_event=15,
            sort_keys=False,
        )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_stdlib_logging(log_level: str = "INFO") -> None:
    """Route stdlib logging to stdout at the configured level."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "console",
    env: Optional[str] = None,
) -> None:
    """
    Initialize logging system for the application.

    Should be called once, early in application startup (create_app).
    """
    configure_stdlib_logging(log_level)
    configure_structlog(log_format)

    get_logger(__name__).info(
        "logging_initialized",
        env=env,
        log_level=log_level,
        log_format=log_format,
    )


def get_logger(name: str) -> BoundLogger:
    """
    Get a configured logger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("verification_code_issued", identity="a@x.com")
    """
    return structlog.get_logger(name)


def log_with_context(logger: BoundLogger, **context) -> BoundLogger:
    """Bind context to a logger for all subsequent log calls."""
    return logger.bind(**context)


__all__ = [
    "REDACTED_FIELDS",
    "configure_structlog",
    "get_logger",
    "log_with_context",
    "setup_logging",
]
