"""Structured logging for the temp markdown service.

Every record passes through :func:`redact_secrets` before rendering, so an API
key that ends up in an event (a header dump, a bound request context) never
reaches stdout or the log file.
"""

import sys
import structlog
import logging
from pathlib import Path
from typing import Any, List, MutableMapping, Optional
from core.config import Settings

SERVICE_NAME = "temp-markdown"
REDACTED = "[REDACTED]"

# Event keys whose values are credentials
SECRET_KEYS = frozenset([
    "api_key",
    "x_api_key",
    "x-api-key",
    "authorization",
    "token",
    "api_secret_key",
    "api_secret_keys",
])

# Libraries that log every request or reload at INFO
NOISY_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "watchfiles", "redis")


def redact_secrets(logger: Any, method_name: str,
                   event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Replace credential values, including inside one level of nested dicts."""
    for key, value in list(event_dict.items()):
        if key.lower() in SECRET_KEYS:
            event_dict[key] = REDACTED
        elif isinstance(value, dict):
            event_dict[key] = {
                k: REDACTED if str(k).lower() in SECRET_KEYS else v
                for k, v in value.items()
            }
    return event_dict


def add_service_name(logger: Any, method_name: str,
                     event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _handlers(settings: Settings, level: int) -> List[logging.Handler]:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    handlers: List[logging.Handler] = [console_handler]

    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        handlers.append(file_handler)

    return handlers


def configure_logging(settings: Settings) -> None:
    """Configure structlog on top of stdlib logging from ``LOG_*`` settings."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, handlers=_handlers(settings, level), format="%(message)s")

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        # Machine-readable output carries the full timestamp and origin
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso", utc=True))
        processors.insert(0, structlog.stdlib.add_logger_name)
        processors.insert(0, add_service_name)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.insert(0, structlog.processors.TimeStamper(fmt="%H:%M:%S"))
        processors.append(structlog.dev.ConsoleRenderer(
            colors=False,
            pad_event=35,
            exception_formatter=structlog.dev.plain_traceback
        ))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_store_operation(logger: structlog.BoundLogger, operation: str,
                        key: str, hit: Optional[bool] = None, **kwargs) -> None:
    """Log a Redis round trip at debug level."""
    log_data = {
        "operation": operation,
        "store_key": key,
        **kwargs
    }

    if hit is not None:
        log_data["store_hit"] = hit

    logger.debug("Store operation", **log_data)


def log_document_event(logger: structlog.BoundLogger, event: str,
                       document_id: str, **kwargs) -> None:
    """Log a document lifecycle event (created, retrieved, expired, purged)."""
    logger.info(
        event,
        document_id=document_id,
        **kwargs
    )
