"""Tests for storage client configuration."""

from services.storage.app.config import Settings, get_settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("YEP_STORAGE_API_TOKEN", raising=False)
        settings = Settings(_env_file=None)

        assert settings.service_name == "yep-storage"
        assert settings.api_token == ""
        assert settings.upload_filename == "attachment"
        assert settings.credentials_timeout_seconds == 30.0

    def test_env_overrides(self, monkeypatch):
        """Test values are read from prefixed environment variables."""
        monkeypatch.setenv("YEP_STORAGE_API_BASE_URL", "https://staging.example.com")
        monkeypatch.setenv("YEP_STORAGE_API_TOKEN", "abc")
        monkeypatch.setenv("YEP_STORAGE_UPLOAD_TIMEOUT_SECONDS", "12.5")

        settings = Settings(_env_file=None)

        assert settings.api_base_url == "https://staging.example.com"
        assert settings.api_token == "abc"
        assert settings.upload_timeout_seconds == 12.5

    def test_unprefixed_env_ignored(self, monkeypatch):
        monkeypatch.setenv("API_TOKEN", "should-not-be-used")
        monkeypatch.delenv("YEP_STORAGE_API_TOKEN", raising=False)

        assert Settings(_env_file=None).api_token == ""

    def test_get_settings_cached(self):
        get_settings.cache_clear()

        assert get_settings() is get_settings()
