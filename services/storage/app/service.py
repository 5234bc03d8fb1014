"""Fetch-then-upload workflow for attachments and avatars."""

from typing import Any

from services.storage.app.auth import TokenAuth
from services.storage.app.config import Settings, get_settings
from services.storage.app.core.schemas import CredentialScope, UploadOutcome, UploadSource
from services.storage.app.credentials.client import CredentialClient
from services.storage.app.upload.uploader import Uploader
from shared.utils.logging import get_logger, set_correlation_id

logger = get_logger(__name__)


class StorageService:
    """Uploads content using freshly fetched credentials for each attempt."""

    def __init__(
        self,
        credential_client: CredentialClient,
        uploader: Uploader,
    ):
        """Initialize storage service.

        Args:
            credential_client: Client for the form-fields endpoints
            uploader: Uploader for the storage endpoint
        """
        self.credential_client = credential_client
        self.uploader = uploader

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "StorageService":
        """Build a service from configuration."""
        settings = settings or get_settings()
        return cls(
            credential_client=CredentialClient(
                base_url=settings.api_base_url,
                auth=TokenAuth(settings.api_token),
                timeout=settings.credentials_timeout_seconds,
            ),
            uploader=Uploader(
                timeout=settings.upload_timeout_seconds,
                filename=settings.upload_filename,
            ),
        )

    async def close(self) -> None:
        await self.credential_client.close()
        await self.uploader.close()

    async def __aenter__(self) -> "StorageService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def upload(
        self,
        scope: CredentialScope,
        source: UploadSource,
        mime_type: str,
    ) -> UploadOutcome:
        """Fetch credentials for ``scope`` and upload ``source`` with them.

        Raises:
            CredentialFetchError: If credentials cannot be retrieved
            CredentialParseError: If the credentials response is incomplete
        """
        correlation_id = set_correlation_id()
        logger.info("storage_upload_requested", scope=scope.value, correlation_id=correlation_id)

        credentials = await self.credential_client.fetch(scope)
        return await self.uploader.upload(source, mime_type, credentials)

    async def upload_attachment(self, source: UploadSource, mime_type: str) -> UploadOutcome:
        """Upload a message attachment (private scope)."""
        return await self.upload(CredentialScope.PRIVATE, source, mime_type)

    async def upload_avatar(self, source: UploadSource, mime_type: str) -> UploadOutcome:
        """Upload an avatar (public scope)."""
        return await self.upload(CredentialScope.PUBLIC, source, mime_type)
