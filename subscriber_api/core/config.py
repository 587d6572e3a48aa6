from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    public_jwt_secret: str | None = None
    mailerlite_api_key: str | None = None
    mailerlite_base_url: str = "https://connect.mailerlite.com/api"
    mailerlite_timeout_seconds: float = 10.0
    mailerlite_validation_timeout_seconds: float = 5.0
    environment: str = "unknown"
    app_version: str = "1.0.0"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("public_jwt_secret", "mailerlite_api_key", mode="before")
    @classmethod
    def _blank_as_unset(cls, value: str | None) -> str | None:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("mailerlite_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

@lru_cache

def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()
