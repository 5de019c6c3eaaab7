"""
Structured logging configuration using structlog.

Provides consistent, structured logging across all modules.
Token values and vault headers never reach the log sink in clear text.
"""

import logging
import re
import sys
from typing import Any

import structlog

from vaulty.shared.infrastructure.config import settings

_REDACTION_PATTERNS = {
    r"(x-vault-token|token|password|secret)['\"]?\s*[:=]\s*['\"]?([^'\"\s,]+)": r"\1=[REDACTED]",
    r"\b(hvs|hvb|s|b)\.[A-Za-z0-9_-]{8,}\b": "[TOKEN_REDACTED]",
    r"Bearer\s+\S+": "Bearer [TOKEN_REDACTED]",
}

_SENSITIVE_KEYS = {"token", "token_value", "value", "x-vault-token", "secret", "password"}


def privacy_redactor(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Redact token values and secret-looking strings from log events.

    Args:
        logger: Logger instance
        method_name: Logging method name
        event_dict: Event dictionary to process

    Returns:
        Redacted event dictionary
    """
    if not getattr(settings, "log_redaction_enabled", True):
        return event_dict

    def redact_string(text: str) -> str:
        for pattern, replacement in _REDACTION_PATTERNS.items():
            text = re.sub(pattern, replacement, text, flags=re.IGNORECASE)
        return text

    def redact_value(key: str, value: Any) -> Any:
        if key.lower() in _SENSITIVE_KEYS and isinstance(value, str):
            return "[REDACTED]"
        if isinstance(value, str):
            return redact_string(value)
        if isinstance(value, dict):
            return {k: redact_value(str(k), v) for k, v in value.items()}
        if isinstance(value, list):
            return [redact_string(i) if isinstance(i, str) else i for i in value]
        return value

    return {k: (v if k == "event" else redact_value(k, v)) for k, v in event_dict.items()}


def configure_logging(level: str | None = None, stream: Any = sys.stderr) -> None:
    """
    Configure structlog for the application.

    Sets up:
    - Pretty console output for development
    - JSON output for production
    - Log level from settings, overridden by the --log-level option
    """
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        privacy_redactor,
    ]

    if settings.is_development:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=stream.isatty() if hasattr(stream, "isatty") else False),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    log_level = (level or settings.log_level).upper()
    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=getattr(logging, log_level, logging.WARNING),
        force=True,
    )


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("store_loaded", source="/home/me/.vaulty-store")
    """
    return structlog.get_logger(name)
