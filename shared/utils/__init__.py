"""Shared utilities for the Yep storage client."""

from shared.utils.logging import (
    configure_logging,
    correlation_headers,
    get_correlation_id,
    get_logger,
    redact_secrets,
    set_correlation_id,
)
from shared.utils.metrics import create_counter, create_histogram

__all__ = [
    "configure_logging",
    "correlation_headers",
    "get_correlation_id",
    "get_logger",
    "redact_secrets",
    "set_correlation_id",
    "create_counter",
    "create_histogram",
]
