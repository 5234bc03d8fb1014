"""Storage client errors."""

from services.storage.app.core.schemas import FailureReason


class StorageError(Exception):
    """Base class for storage client errors."""

    reason: FailureReason = FailureReason.OTHER

    def __init__(self, message: str, detail: str | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class CredentialFetchError(StorageError):
    """Upload credentials could not be retrieved from the API."""

    def __init__(
        self,
        message: str,
        reason: FailureReason = FailureReason.OTHER,
        detail: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message, detail)
        self.reason = reason
        self.status_code = status_code


class CredentialParseError(StorageError):
    """The credentials document does not have the expected shape."""

    reason = FailureReason.COULD_NOT_PARSE_JSON

    def __init__(
        self,
        message: str,
        missing_fields: list[str] | None = None,
        detail: str | None = None,
    ):
        super().__init__(message, detail)
        self.missing_fields = missing_fields or []


class UploadTransportError(StorageError):
    """The storage endpoint answered the upload with a non-success status."""

    def __init__(self, status_code: int, response_text: str | None = None):
        super().__init__(
            f"Upload rejected with HTTP {status_code}",
            detail=response_text,
        )
        self.status_code = status_code
        self.response_text = response_text
