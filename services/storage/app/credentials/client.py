"""Fetch signed upload credentials from the Yep API."""

from typing import Any, Callable

import httpx

from services.storage.app.core.exceptions import (
    CredentialFetchError,
    CredentialParseError,
    StorageError,
)
from services.storage.app.core.schemas import (
    CredentialScope,
    FailureReason,
    UploadCredentials,
)
from services.storage.app.credentials.failures import (
    FailureHandler,
    failure_reason_for,
    log_failure,
)
from services.storage.app.credentials.parser import parse_credentials
from shared.utils.logging import correlation_headers, get_logger
from shared.utils.metrics import create_counter

logger = get_logger(__name__)

CREDENTIAL_FETCHES = create_counter(
    "storage_credential_fetches_total",
    "Upload credential requests by scope and outcome",
    ["scope", "outcome"],
)


class CredentialClient:
    """Client for the attachment form-fields endpoints.

    Failures of the callback-style entry points go to the caller's handler,
    or to the default handler given at construction.
    """

    def __init__(
        self,
        base_url: str,
        auth: httpx.Auth | None = None,
        default_failure_handler: FailureHandler = log_failure,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        """Initialize credential client.

        Args:
            base_url: Yep API base URL
            auth: Authentication applied to every request
            default_failure_handler: Used when a call supplies no handler
            http_client: Shared HTTP client (not closed by this client)
            timeout: Request timeout in seconds for an owned client
        """
        self.base_url = base_url.rstrip("/")
        self.auth = auth
        self.default_failure_handler = default_failure_handler
        self.timeout = httpx.Timeout(timeout)
        self._client = http_client
        self._owns_client = http_client is None

    async def get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "CredentialClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_json(self, path: str) -> Any:
        """Authenticated GET returning the decoded JSON body.

        Raises:
            CredentialFetchError: On transport error, non-2xx status, empty or
                non-JSON body
        """
        client = await self.get_client()
        url = f"{self.base_url}{path}"
        headers = {"Accept": "application/json", **correlation_headers()}
        request_kwargs: dict[str, Any] = {"headers": headers}
        if self.auth is not None:
            request_kwargs["auth"] = self.auth

        try:
            response = await client.get(url, **request_kwargs)
        except httpx.HTTPError as e:
            raise CredentialFetchError(
                f"Request to {path} failed",
                reason=FailureReason.OTHER,
                detail=str(e) or type(e).__name__,
            ) from e

        logger.debug("credentials_request", url=url, status=response.status_code)

        if not response.is_success:
            raise CredentialFetchError(
                f"{path} returned HTTP {response.status_code}",
                reason=FailureReason.NO_SUCCESS_STATUS_CODE,
                detail=response.text or None,
                status_code=response.status_code,
            )

        if not response.content:
            raise CredentialFetchError(
                f"{path} returned an empty body",
                reason=FailureReason.NO_DATA,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise CredentialFetchError(
                f"{path} returned a body that is not JSON",
                reason=FailureReason.COULD_NOT_PARSE_JSON,
                detail=response.text[:200],
                status_code=response.status_code,
            ) from e

    async def fetch(self, scope: CredentialScope) -> UploadCredentials:
        """Fetch and parse upload credentials for a scope.

        Args:
            scope: PRIVATE for attachments, PUBLIC for avatars

        Returns:
            Complete upload credentials

        Raises:
            CredentialFetchError: If the API call fails
            CredentialParseError: If the response lacks a required value
        """
        try:
            payload = await self._get_json(scope.path)
        except CredentialFetchError as e:
            CREDENTIAL_FETCHES.labels(scope=scope.value, outcome="fetch_error").inc()
            logger.error(
                "credentials_fetch_failed",
                scope=scope.value,
                reason=e.reason.value,
                status=e.status_code,
                error=e.message,
            )
            raise

        try:
            credentials = parse_credentials(payload)
        except CredentialParseError as e:
            CREDENTIAL_FETCHES.labels(scope=scope.value, outcome="parse_error").inc()
            logger.error(
                "credentials_parse_failed",
                scope=scope.value,
                missing_fields=e.missing_fields,
                error=e.message,
            )
            raise

        CREDENTIAL_FETCHES.labels(scope=scope.value, outcome="success").inc()
        logger.info(
            "credentials_fetched",
            scope=scope.value,
            endpoint_url=credentials.endpoint_url,
            object_key=credentials.object_key,
        )
        return credentials

    async def fetch_with_handlers(
        self,
        scope: CredentialScope,
        on_success: Callable[[UploadCredentials], None],
        on_failure: FailureHandler | None = None,
    ) -> bool:
        """Fetch credentials and report through callbacks.

        Exactly one of ``on_success`` or the failure handler is called. Parse
        failures are reported as COULD_NOT_PARSE_JSON.

        Returns:
            True if ``on_success`` was called
        """
        handler = on_failure or self.default_failure_handler
        try:
            credentials = await self.fetch(scope)
        except StorageError as e:
            reason, detail = failure_reason_for(e)
            handler(reason, detail)
            return False

        on_success(credentials)
        return True

    async def private_upload_credentials(
        self,
        on_success: Callable[[UploadCredentials], None],
        on_failure: FailureHandler | None = None,
    ) -> bool:
        """Credentials for message attachments."""
        return await self.fetch_with_handlers(CredentialScope.PRIVATE, on_success, on_failure)

    async def public_upload_credentials(
        self,
        on_success: Callable[[UploadCredentials], None],
        on_failure: FailureHandler | None = None,
    ) -> bool:
        """Credentials for avatars."""
        return await self.fetch_with_handlers(CredentialScope.PUBLIC, on_success, on_failure)
