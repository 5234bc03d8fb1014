"""Parse S3 POST-policy form fields returned by the Yep API."""

from typing import Any

from pydantic import BaseModel, StrictStr, ValidationError

from services.storage.app.core.exceptions import CredentialParseError
from services.storage.app.core.schemas import UploadCredentials
from shared.utils.logging import get_logger

logger = get_logger(__name__)

# Condition-list keys and the credential field each one fills
CONDITION_FIELDS: dict[str, str] = {
    "acl": "acl",
    "x-amz-credential": "credential_scope",
    "x-amz-algorithm": "signature_algorithm",
    "x-amz-date": "date",
}


class PolicyDocument(BaseModel):
    """Decoded policy; only the condition list is read."""

    conditions: list[dict[str, Any]]


class FormOptions(BaseModel):
    """The ``options`` object of the form-fields response."""

    encoded_policy: StrictStr
    key: StrictStr
    signature: StrictStr
    url: StrictStr
    policy: PolicyDocument


class FormFieldsDocument(BaseModel):
    """Top-level form-fields response."""

    options: FormOptions


def _describe_validation_error(exc: ValidationError) -> list[str]:
    """Dotted locations of every schema violation."""
    return [
        ".".join(str(part) for part in error["loc"]) or "<root>"
        for error in exc.errors()
    ]


def scan_conditions(conditions: list[dict[str, Any]]) -> dict[str, str | None]:
    """Collect the credential values scattered across the condition list.

    Every key of every element is visited in order. A key seen more than once
    keeps its last value; a non-string last value counts as absent.

    Returns:
        Map of credential field name to value (None if not a string)
    """
    found: dict[str, str | None] = {}
    duplicates: set[str] = set()

    for condition in conditions:
        for name, value in condition.items():
            field = CONDITION_FIELDS.get(name)
            if field is None:
                continue
            if field in found:
                duplicates.add(name)
            found[field] = value if isinstance(value, str) else None

    if duplicates:
        logger.warning(
            "duplicate_policy_conditions",
            keys=sorted(duplicates),
            message="last occurrence wins",
        )

    return found


def parse_credentials(raw: Any) -> UploadCredentials:
    """Parse a form-fields response into upload credentials.

    Args:
        raw: Decoded JSON (dict) or the raw JSON text/bytes

    Returns:
        Complete, validated upload credentials

    Raises:
        CredentialParseError: If any of the eight values is missing, empty or
            of the wrong type, the endpoint URL is not absolute http(s), or
            the document shape is invalid
    """
    try:
        if isinstance(raw, (str, bytes, bytearray)):
            document = FormFieldsDocument.model_validate_json(raw)
        else:
            document = FormFieldsDocument.model_validate(raw)
    except ValidationError as e:
        locations = _describe_validation_error(e)
        logger.warning("credentials_schema_invalid", errors=locations)
        raise CredentialParseError(
            "Upload credentials document has an invalid shape",
            detail=", ".join(locations),
        ) from e

    options = document.options
    scanned = scan_conditions(options.policy.conditions)

    values: dict[str, str | None] = {
        "endpoint_url": options.url,
        "object_key": options.key,
        "signature": options.signature,
        "encoded_policy": options.encoded_policy,
        **{field: scanned.get(field) for field in CONDITION_FIELDS.values()},
    }

    missing = [field for field, value in values.items() if not value]
    if missing:
        logger.warning("credentials_incomplete", missing_fields=missing)
        raise CredentialParseError(
            f"Upload credentials missing: {', '.join(missing)}",
            missing_fields=missing,
        )

    try:
        return UploadCredentials(**values)
    except ValidationError as e:
        locations = _describe_validation_error(e)
        logger.warning("credentials_invalid", errors=locations)
        raise CredentialParseError(
            "Upload credentials carry an invalid value",
            detail=", ".join(locations),
        ) from e
