"""
Logging configuration using structlog.
Outputs either JSON lines (machine-readable) or readable console output.
"""

import logging
import sys
from datetime import datetime, timezone

import structlog
from structlog.typing import EventDict


def add_timestamp(logger: str, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO timestamp to log entry."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return event_dict


def setup_logging(log_level: str = "INFO", debug: bool = False, json_logs: bool = False) -> None:
    """
    Configure structlog on top of stdlib logging.

    json_logs=True renders one JSON object per line (for log shipping),
    otherwise the colourless console renderer is used.
    """

    # Common processors for all outputs
    shared_processors: list = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if json_logs:
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.setLevel(logging.DEBUG if debug else logging.INFO)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Route uvicorn through the same handler
    for logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
        logger = logging.getLogger(logger_name)
        logger.handlers.clear()
        logger.addHandler(handler)
        logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def init_logging() -> None:
    """Initialize logging with the application settings."""
    from parentguidance.config import settings
    setup_logging(log_level=settings.LOG_LEVEL, debug=settings.DEBUG, json_logs=settings.LOG_JSON)
