"""Core storage client types."""

from services.storage.app.core.exceptions import (
    CredentialFetchError,
    CredentialParseError,
    StorageError,
    UploadTransportError,
)
from services.storage.app.core.schemas import (
    CredentialScope,
    FailureReason,
    UploadCredentials,
    UploadOutcome,
    UploadSource,
    UploadState,
)
from services.storage.app.core.state_machine import (
    InvalidTransitionError,
    UploadLifecycle,
    UploadStateMachine,
)

__all__ = [
    "CredentialFetchError",
    "CredentialParseError",
    "StorageError",
    "UploadTransportError",
    "CredentialScope",
    "FailureReason",
    "UploadCredentials",
    "UploadOutcome",
    "UploadSource",
    "UploadState",
    "InvalidTransitionError",
    "UploadLifecycle",
    "UploadStateMachine",
]
