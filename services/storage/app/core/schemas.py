"""Storage client data model."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)


class CredentialScope(str, Enum):
    """Which upload-credential endpoint to ask."""

    PRIVATE = "private"  # Message attachments
    PUBLIC = "public"  # Avatars

    @property
    def path(self) -> str:
        """API path of the form-fields endpoint for this scope."""
        return _SCOPE_PATHS[self]


_SCOPE_PATHS = {
    CredentialScope.PRIVATE: "/api/v1/attachments/s3_upload_form_fields",
    CredentialScope.PUBLIC: "/api/v1/attachments/s3_upload_public_form_fields",
}


class FailureReason(str, Enum):
    """Failure categories reported to failure handlers."""

    COULD_NOT_PARSE_JSON = "could_not_parse_json"
    NO_DATA = "no_data"
    NO_SUCCESS_STATUS_CODE = "no_success_status_code"
    OTHER = "other"


class UploadState(str, Enum):
    """Lifecycle of a single upload."""

    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_HTTP_URL = TypeAdapter(AnyHttpUrl)


class UploadCredentials(BaseModel):
    """Signed S3 POST-policy parameters for one upload.

    Every field is required and non-empty, so an instance is always complete.
    The signature and policy are left out of ``repr()`` and ``str()``.
    """

    model_config = ConfigDict(frozen=True)

    endpoint_url: str = Field(..., min_length=1, description="Storage POST target")
    object_key: str = Field(..., min_length=1, description="Destination object key")
    acl: str = Field(..., min_length=1)
    signature_algorithm: str = Field(..., min_length=1, description="e.g. AWS4-HMAC-SHA256")
    signature: str = Field(..., min_length=1, repr=False)
    date: str = Field(..., min_length=1, description="Issuance timestamp token")
    credential_scope: str = Field(..., min_length=1, description="x-amz-credential value")
    encoded_policy: str = Field(..., min_length=1, repr=False, description="Base64 policy document")

    @field_validator("endpoint_url")
    @classmethod
    def validate_endpoint_url(cls, v: str) -> str:
        """Require an absolute http(s) URL with a host."""
        try:
            _HTTP_URL.validate_python(v)
        except ValidationError as e:
            raise ValueError(f"endpoint_url must be an absolute http(s) URL: {v!r}") from e
        return v


@dataclass(frozen=True)
class UploadSource:
    """File content to upload, either a path on disk or bytes in memory.

    When both are set the path is used and ``data`` is ignored. When neither
    is set the upload request is sent without a file part.
    """

    file_path: Path | None = None
    data: bytes | None = None

    @classmethod
    def from_path(cls, file_path: str | Path) -> "UploadSource":
        return cls(file_path=Path(file_path))

    @classmethod
    def from_bytes(cls, data: bytes) -> "UploadSource":
        return cls(data=data)

    @property
    def is_empty(self) -> bool:
        return self.file_path is None and self.data is None


@dataclass(frozen=True)
class UploadOutcome:
    """Result of one upload attempt."""

    success: bool
    error: Exception | None = None
    status_code: int | None = None
    response_text: str | None = None
