"""Tests for the fetch-then-upload workflow."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from services.storage.app.config import Settings
from services.storage.app.core.exceptions import CredentialParseError
from services.storage.app.core.schemas import CredentialScope, UploadOutcome, UploadSource
from services.storage.app.credentials.client import CredentialClient
from services.storage.app.service import StorageService
from services.storage.app.upload.uploader import Uploader


class TestStorageService:
    """Tests for StorageService."""

    @pytest.fixture
    def mock_credential_client(self, sample_credentials):
        mock = AsyncMock(spec=CredentialClient)
        mock.fetch = AsyncMock(return_value=sample_credentials)
        return mock

    @pytest.fixture
    def mock_uploader(self):
        mock = AsyncMock(spec=Uploader)
        mock.upload = AsyncMock(return_value=UploadOutcome(success=True, status_code=204))
        return mock

    @pytest.fixture
    def service(self, mock_credential_client, mock_uploader):
        return StorageService(
            credential_client=mock_credential_client,
            uploader=mock_uploader,
        )

    @pytest.mark.asyncio
    async def test_attachment_uses_private_scope(
        self, service, mock_credential_client, mock_uploader, sample_credentials
    ):
        """Test attachments fetch private credentials then upload with them."""
        source = UploadSource.from_bytes(b"0123456789")

        outcome = await service.upload_attachment(source, "image/png")

        assert outcome.success is True
        mock_credential_client.fetch.assert_awaited_once_with(CredentialScope.PRIVATE)
        mock_uploader.upload.assert_awaited_once_with(source, "image/png", sample_credentials)

    @pytest.mark.asyncio
    async def test_avatar_uses_public_scope(self, service, mock_credential_client):
        """Test avatars fetch public credentials."""
        await service.upload_avatar(UploadSource.from_bytes(b"avatar"), "image/jpeg")

        mock_credential_client.fetch.assert_awaited_once_with(CredentialScope.PUBLIC)

    @pytest.mark.asyncio
    async def test_credential_failure_skips_upload(
        self, service, mock_credential_client, mock_uploader
    ):
        """Test no upload is attempted without credentials."""
        mock_credential_client.fetch.side_effect = CredentialParseError("missing acl")

        with pytest.raises(CredentialParseError):
            await service.upload_attachment(UploadSource.from_bytes(b"x"), "image/png")

        mock_uploader.upload.assert_not_called()

    @pytest.mark.asyncio
    async def test_close_closes_both(self, service, mock_credential_client, mock_uploader):
        async with service:
            pass

        mock_credential_client.close.assert_awaited_once()
        mock_uploader.close.assert_awaited_once()

    def test_from_settings(self):
        """Test the service is wired from configuration."""
        settings = Settings(
            api_base_url="https://api.example.com/",
            api_token="token",
            upload_timeout_seconds=60.0,
            upload_filename="blob",
        )

        service = StorageService.from_settings(settings)

        assert service.credential_client.base_url == "https://api.example.com"
        assert service.credential_client.auth.token == "token"
        assert service.uploader.filename == "blob"
        assert service.uploader.timeout.read == 60.0

    def test_from_settings_requires_token(self):
        with pytest.raises(ValueError):
            StorageService.from_settings(Settings(api_token=""))
