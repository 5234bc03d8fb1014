"""Storage client configuration via environment variables."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Storage client configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="YEP_STORAGE_",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars not defined in this model
    )

    # Service settings
    service_name: str = "yep-storage"
    environment: str = "development"
    log_level: str = "INFO"
    log_json: bool = True

    # Yep API settings
    api_base_url: str = "https://api.soyep.com"
    api_token: str = Field(default="", description="v1 access token for the Yep API")
    credentials_timeout_seconds: float = 30.0

    # Upload settings
    upload_timeout_seconds: float = 300.0
    upload_filename: str = "attachment"  # Filename sent with every file part


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
