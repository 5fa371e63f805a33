"""
Centralized configuration management using Pydantic Settings.

Configuration Sources (in order of precedence):
1. Environment variables
2. .env file
3. Default values

Usage:
    from watermark_builder.infra.settings import get_settings

    settings = get_settings()
    print(settings.WATERMARK_ENDPOINT_URL)
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

import httpx
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ENDPOINT_URL = "https://watermark-builder.herokuapp.com/api/watermark"


class Settings(BaseSettings):
    """
    Client settings loaded from environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    # =========================================================================
    # Watermarking service
    # =========================================================================

    WATERMARK_ENDPOINT_URL: str = Field(
        default=DEFAULT_ENDPOINT_URL,
        description="URL the multipart watermark requests are POSTed to"
    )
    REQUEST_TIMEOUT_SECONDS: Optional[float] = Field(
        default=None,
        gt=0.0,
        description="Request timeout; unset leaves the HTTP client default in place"
    )

    # =========================================================================
    # Presentation
    # =========================================================================

    LANGUAGE: Literal["lv", "en"] = Field(
        default="lv",
        description="Language of user-facing error messages"
    )
    EXPORT_DIR: Optional[str] = Field(
        default=None,
        description="Directory exported results are written under (default: system temp dir)"
    )

    # =========================================================================
    # Logging
    # =========================================================================

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Logging level"
    )
    LOG_FORMAT: Literal["json", "console", "auto"] = Field(
        default="auto",
        description="Log output format"
    )
    USE_STRUCTURED_LOGGING: bool = Field(
        default=True,
        description="Use structlog for structured logging"
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("WATERMARK_ENDPOINT_URL")
    @classmethod
    def validate_endpoint_url(cls, v: str) -> str:
        """Only plain HTTP(S) endpoints are accepted."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("WATERMARK_ENDPOINT_URL must be an http:// or https:// URL")
        try:
            httpx.URL(v)
        except httpx.InvalidURL as e:
            raise ValueError(f"WATERMARK_ENDPOINT_URL is not a valid URL: {e}") from e
        return v

    def use_json_logs(self, is_tty: bool) -> bool:
        """
        Resolve LOG_FORMAT to a concrete choice.

        Args:
            is_tty: Whether the log stream is attached to a terminal

        Returns:
            True for JSON output, False for console output
        """
        if self.LOG_FORMAT == "auto":
            return not is_tty
        return self.LOG_FORMAT == "json"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance
    """
    return Settings()


def clear_settings_cache() -> None:
    """
    Clear the settings cache.

    Useful for testing or reloading configuration.
    """
    get_settings.cache_clear()
