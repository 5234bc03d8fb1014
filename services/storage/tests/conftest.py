"""Test fixtures for the storage client."""

import re
from typing import Any, Callable

import httpx
import pytest

from services.storage.app.core.schemas import UploadCredentials


@pytest.fixture
def sample_form_fields_response() -> dict[str, Any]:
    """Form-fields response as returned by the Yep API."""
    return {
        "options": {
            "encoded_policy": "cG9saWN5",
            "key": "k1",
            "signature": "sig1",
            "url": "https://bucket.s3.amazonaws.com",
            "policy": {
                "expiration": "2015-01-01T01:00:00Z",
                "conditions": [
                    {"bucket": "bucket"},
                    {"acl": "public-read"},
                    {"x-amz-credential": "cred1"},
                    {"x-amz-algorithm": "AWS4-HMAC-SHA256", "x-amz-date": "20150101T000000Z"},
                ],
            },
        }
    }


@pytest.fixture
def sample_credentials() -> UploadCredentials:
    """Credentials matching sample_form_fields_response."""
    return UploadCredentials(
        endpoint_url="https://bucket.s3.amazonaws.com",
        object_key="k1",
        acl="public-read",
        signature_algorithm="AWS4-HMAC-SHA256",
        signature="sig1",
        date="20150101T000000Z",
        credential_scope="cred1",
        encoded_policy="cG9saWN5",
    )


@pytest.fixture
def parse_multipart() -> Callable[[httpx.Request], list[dict[str, Any]]]:
    """Split a multipart/form-data request into its parts, in order."""

    def parse(request: httpx.Request) -> list[dict[str, Any]]:
        content_type = request.headers["content-type"]
        assert content_type.startswith("multipart/form-data")
        boundary = content_type.split("boundary=", 1)[1].encode()

        parts = []
        for chunk in request.content.split(b"--" + boundary):
            if not chunk or chunk.startswith(b"--"):
                continue
            chunk = chunk.removeprefix(b"\r\n").removesuffix(b"\r\n")
            head, _, body = chunk.partition(b"\r\n\r\n")
            headers = dict(
                line.split(": ", 1) for line in head.decode().split("\r\n") if line
            )
            disposition = headers["Content-Disposition"]
            filename = re.search(r'filename="([^"]*)"', disposition)
            parts.append({
                "name": re.search(r'; name="([^"]*)"', disposition).group(1),
                "filename": filename.group(1) if filename else None,
                "content_type": headers.get("Content-Type"),
                "body": body,
            })
        return parts

    return parse
