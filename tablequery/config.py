"""
Configuration settings for tablequery.

Uses Pydantic Settings to load environment variables for the record API
endpoint, the request retry policy, and logging. Library code never reads
these implicitly: `TableClient.from_settings()` is the single place the
environment is consulted, everything else receives explicit values.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://erp.layonsconstruction.com/api.php"


class Settings(BaseSettings):
    # Record API
    api_url: str = Field(DEFAULT_API_URL, alias="TABLEQUERY_API_URL")
    api_timeout_seconds: float = Field(10.0, alias="TABLEQUERY_API_TIMEOUT", gt=0)
    api_max_attempts: int = Field(3, alias="TABLEQUERY_API_MAX_ATTEMPTS", ge=1)
    api_retry_delay_seconds: float = Field(1.0, alias="TABLEQUERY_API_RETRY_DELAY", ge=0)

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["DEFAULT_API_URL", "Settings", "get_settings"]
