"""Structured logging for the Yep storage client.

A single correlation ID follows one upload from the credential request to
the storage POST. It is sent to the Yep API as ``X-Correlation-ID`` and
stamped onto every log event, so both sides of an upload can be matched.
"""

import contextvars
import logging
import sys
import uuid
from typing import Any, TextIO

import structlog

CORRELATION_ID_HEADER = "X-Correlation-ID"

# Event keys whose values are credentials or signed material
SECRET_KEYS = frozenset({"authorization", "api_token", "signature", "encoded_policy", "policy"})
REDACTED = "[redacted]"

_correlation_id: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)


def get_correlation_id() -> str:
    """Correlation ID of the upload running in the current task, or ''."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Start a new upload correlation, generating an ID if none is given.

    The ID lives in a context variable, so concurrent uploads started as
    separate tasks each keep their own.
    """
    cid = correlation_id or str(uuid.uuid4())
    _correlation_id.set(cid)
    return cid


def correlation_headers() -> dict[str, str]:
    """Headers for Yep API requests; empty outside an upload."""
    cid = get_correlation_id()
    return {CORRELATION_ID_HEADER: cid} if cid else {}


def add_correlation_id(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor tying an event to the current upload."""
    correlation_id = get_correlation_id()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def redact_secrets(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor masking tokens, signatures and policies."""
    for key in SECRET_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def configure_logging(
    service_name: str,
    log_level: str = "INFO",
    json_format: bool = True,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog for the storage client.

    Logs go to stderr by default so command-line output on stdout stays
    clean. httpx's own per-request logging is held at WARNING unless
    running at DEBUG, since request lines repeat what the upload events
    already record.

    Args:
        service_name: Bound to every event as ``service``
        log_level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: Render JSON (True) or human-readable console output
        stream: Where log lines are written (defaults to stderr)
    """
    level = getattr(logging, log_level.upper())

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_correlation_id,
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=level,
        force=True,
    )

    httpx_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(httpx_level)

    structlog.contextvars.bind_contextvars(service=service_name)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
