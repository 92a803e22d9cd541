"""
Structlog configuration for structured logging in the CMS admin backend.

JSON output (serialized with orjson) is used in production, a colored console
renderer during development. Application modules obtain loggers through
``get_logger(__name__)`` and log events with key/value context.
"""

import logging
import sys
from typing import Any, Dict, Optional

import orjson
import structlog

DEFAULT_SERVICE_NAME = "cms-admin-backend"

_service_name = DEFAULT_SERVICE_NAME


def orjson_serializer(obj: Any, **kwargs) -> str:
    """
    JSON serializer for the structlog renderer.

    orjson returns bytes, so the result is decoded to str for the stdlib handler.
    Values orjson cannot encode natively fall back to ``str``.
    """
    return orjson.dumps(obj, default=str, option=orjson.OPT_UTC_Z).decode()


def add_service_name(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add the configured service name to every log entry."""
    event_dict["service"] = _service_name
    return event_dict


def configure_structlog(
    service_name: str = DEFAULT_SERVICE_NAME,
    log_level: int = logging.INFO,
    development_mode: bool = False,
) -> None:
    """
    Configure structlog and the root stdlib logger.

    Args:
        service_name: Name of the service for log identification
        log_level: Logging level to set
        development_mode: Whether to use development-friendly output
    """
    global _service_name
    _service_name = service_name

    shared_processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        add_service_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if development_mode:
        renderer = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer(serializer=orjson_serializer)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove all existing handlers to prevent duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # The renderer produces the full line, the handler only writes it out
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger instance.

    The logger is a lazy proxy, so module-level loggers created at import time
    pick up the configuration applied later at startup.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Bound logger instance
    """
    return structlog.get_logger(name)
