"""
Unit tests for settings loading.
"""
import pytest
from pydantic import ValidationError

from watermark_builder.infra.settings import (
    DEFAULT_ENDPOINT_URL,
    Settings,
    clear_settings_cache,
    get_settings,
)


class TestSettings:
    """Tests for Settings defaults and environment overrides."""

    def test_defaults(self):
        settings = Settings()

        assert settings.WATERMARK_ENDPOINT_URL == DEFAULT_ENDPOINT_URL
        assert settings.REQUEST_TIMEOUT_SECONDS is None
        assert settings.LANGUAGE == "lv"
        assert settings.EXPORT_DIR is None
        assert settings.LOG_LEVEL == "WARNING"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("WATERMARK_ENDPOINT_URL", "  http://localhost:3000/api/watermark ")
        monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "7.5")
        monkeypatch.setenv("LANGUAGE", "en")

        settings = Settings()

        assert settings.WATERMARK_ENDPOINT_URL == "http://localhost:3000/api/watermark"
        assert settings.REQUEST_TIMEOUT_SECONDS == 7.5
        assert settings.LANGUAGE == "en"

    @pytest.mark.parametrize("url", ["ftp://host/api", "localhost:3000", "", "http://[::1/api"])
    def test_endpoint_must_be_http(self, url):
        with pytest.raises(ValidationError):
            Settings(WATERMARK_ENDPOINT_URL=url)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(REQUEST_TIMEOUT_SECONDS=0)

    def test_unsupported_language(self):
        with pytest.raises(ValidationError):
            Settings(LANGUAGE="de")

    @pytest.mark.parametrize("log_format,is_tty,expected", [
        ("auto", True, False),
        ("auto", False, True),
        ("json", True, True),
        ("console", False, False),
    ])
    def test_use_json_logs(self, log_format, is_tty, expected):
        assert Settings(LOG_FORMAT=log_format).use_json_logs(is_tty) is expected


class TestSettingsCache:

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_clear_cache_reloads_environment(self, monkeypatch):
        assert get_settings().LANGUAGE == "lv"

        monkeypatch.setenv("LANGUAGE", "en")
        assert get_settings().LANGUAGE == "lv"

        clear_settings_cache()
        assert get_settings().LANGUAGE == "en"
