"""
Structured logging configuration for the watermark builder client.

Provides:
- JSON or console structured logs
- Submission ID correlation
- Binary payload summarisation (image bytes never reach the logs)
- Configurable log levels
"""
from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog

from watermark_builder import __version__

# Context variable for submission ID propagation
submission_id_var: ContextVar[Optional[int]] = ContextVar("submission_id", default=None)


def get_submission_id() -> Optional[int]:
    """Get current submission sequence number from context."""
    return submission_id_var.get()


def set_submission_id(submission_id: int) -> int:
    """
    Set submission sequence number in context.

    Args:
        submission_id: Sequence number of the submission being processed.

    Returns:
        The submission ID that was set.
    """
    submission_id_var.set(submission_id)
    return submission_id


def clear_submission_id() -> None:
    """Clear submission ID from context."""
    submission_id_var.set(None)


def summarize_binary_values(context: Dict[str, Any]) -> Dict[str, Any]:
    """
    Replace raw bytes in a log context with a size summary.

    Args:
        context: Log context dictionary

    Returns:
        Context where every bytes value is replaced by "<N bytes>"
    """
    summarized = {}
    for key, value in context.items():
        if isinstance(value, (bytes, bytearray, memoryview)):
            summarized[key] = f"<{len(value)} bytes>"
        elif isinstance(value, dict):
            summarized[key] = summarize_binary_values(value)
        elif isinstance(value, (list, tuple)):
            summarized[key] = [
                summarize_binary_values(item) if isinstance(item, dict)
                else f"<{len(item)} bytes>" if isinstance(item, (bytes, bytearray))
                else item
                for item in value
            ]
        else:
            summarized[key] = value
    return summarized


def add_submission_id(
    logger: logging.Logger,
    method_name: str,
    event_dict: Dict[str, Any],
) -> Dict[str, Any]:
    """Structlog processor to add submission ID to all log entries."""
    submission_id = get_submission_id()
    if submission_id is not None:
        event_dict["submission_id"] = submission_id
    return event_dict


def strip_binary_payloads(
    logger: logging.Logger,
    method_name: str,
    event_dict: Dict[str, Any],
) -> Dict[str, Any]:
    """Structlog processor to keep image payloads out of logs."""
    return summarize_binary_values(event_dict)


def add_timestamp(
    logger: logging.Logger,
    method_name: str,
    event_dict: Dict[str, Any],
) -> Dict[str, Any]:
    """Structlog processor to add ISO timestamp."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def add_service_info(
    logger: logging.Logger,
    method_name: str,
    event_dict: Dict[str, Any],
) -> Dict[str, Any]:
    """Structlog processor to add client metadata."""
    event_dict["service"] = "watermark-builder"
    event_dict["version"] = __version__
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    json_format: bool = True,
    use_structured_logging: bool = True,
) -> None:
    """
    Configure structured logging for the client.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: If True, output JSON logs. If False, use console format.
        use_structured_logging: If True, use structlog. If False, use basic logging.
    """
    log_level_num = getattr(logging, log_level.upper(), logging.INFO)

    if not use_structured_logging:
        # Fall back to basic logging
        logging.basicConfig(
            level=log_level_num,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            stream=sys.stderr,
        )
        return

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        add_submission_id,
        add_service_info,
        strip_binary_payloads,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        shared_processors.append(structlog.processors.JSONRenderer())
    else:
        shared_processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # stderr keeps stdout free for command line output
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level_num,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger bound to the given name
    """
    return structlog.get_logger(name)


class LogContext:
    """
    Context manager for binding additional context to logs.

    Usage:
        with LogContext(mode="text", sequence=3):
            logger.info("watermark_request_sent")
    """

    def __init__(self, **kwargs: Any):
        self.context = kwargs

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        structlog.contextvars.unbind_contextvars(*self.context.keys())
