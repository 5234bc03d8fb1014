"""Upload credential retrieval and parsing."""

from services.storage.app.credentials.client import CredentialClient
from services.storage.app.credentials.failures import (
    FailureHandler,
    failure_reason_for,
    log_failure,
)
from services.storage.app.credentials.parser import parse_credentials, scan_conditions

__all__ = [
    "CredentialClient",
    "FailureHandler",
    "failure_reason_for",
    "log_failure",
    "parse_credentials",
    "scan_conditions",
]
