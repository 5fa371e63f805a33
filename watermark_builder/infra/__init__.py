"""
Infrastructure layer for configuration and observability.

Provides:
- Settings loaded from environment / .env
- Structured logging with submission correlation
"""
from watermark_builder.infra.logging import (
    configure_logging,
    get_logger,
    get_submission_id,
    set_submission_id,
    clear_submission_id,
    summarize_binary_values,
    LogContext,
)
from watermark_builder.infra.settings import (
    Settings,
    get_settings,
    clear_settings_cache,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "get_submission_id",
    "set_submission_id",
    "clear_submission_id",
    "summarize_binary_values",
    "LogContext",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
