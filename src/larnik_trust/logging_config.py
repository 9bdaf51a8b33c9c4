"""Structured logging for the trust boundary.

Token and payment modules log through ``get_logger``. Every event passes
through ``redact_sensitive_values`` so a credential bound by a caller never
reaches a sink.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, Processor

from larnik_trust.config import Settings

REDACTED = "[REDACTED]"

_REDACTED_KEYS = frozenset(
    {
        "token",
        "access_token",
        "refresh_token",
        "authorization",
        "signature",
        "razorpay_signature",
        "secret",
        "key_secret",
        "webhook_secret",
    }
)


def redact_sensitive_values(logger: object, method_name: str, event_dict: EventDict) -> EventDict:
    """Replace credential material in log events with a placeholder."""
    for key in _REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        redact_sensitive_values,
    ]


def configure_logging(log_level: str = "INFO", format_as_json: bool = True) -> None:
    """
    Route structlog events through the stdlib root logger on stdout.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_as_json: JSON lines if True; human-readable console output otherwise

    Raises:
        ValueError: If ``log_level`` is not a stdlib level name
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    processors = _shared_processors()
    if format_as_json:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_logging(settings: Settings) -> None:
    """Configure logging from loaded settings; console output in development."""
    configure_logging(
        log_level=settings.log_level,
        format_as_json=settings.environment != "development",
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Logger for a package module; pass ``__name__``."""
    return structlog.get_logger(name)
