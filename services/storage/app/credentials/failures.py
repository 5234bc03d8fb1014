"""Failure handler interface for Yep API calls."""

from typing import Callable

from services.storage.app.core.exceptions import StorageError
from services.storage.app.core.schemas import FailureReason
from shared.utils.logging import get_logger

logger = get_logger(__name__)

FailureHandler = Callable[[FailureReason, str | None], None]


def log_failure(reason: FailureReason, detail: str | None = None) -> None:
    """Default failure handler: record the failure and move on."""
    logger.warning("api_request_failed", reason=reason.value, detail=detail)


def failure_reason_for(exc: Exception) -> tuple[FailureReason, str | None]:
    """Map an exception to the (reason, detail) pair handlers receive."""
    if isinstance(exc, StorageError):
        return exc.reason, exc.detail or exc.message
    return FailureReason.OTHER, str(exc) or type(exc).__name__
