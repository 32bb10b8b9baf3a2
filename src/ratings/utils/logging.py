"""Logging configuration for the Ratings domain.

Standard library handlers do the writing; structlog renders the events.
Console output is colourised in development and JSON in production/staging.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

_LEVEL_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

_LOG_FILE = "ratings.log"
_ERROR_LOG_FILE = "ratings_error.log"
_MAX_BYTES = 10 * 1024 * 1024


def current_env() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """Get log level based on environment, unless LOG_LEVEL overrides it."""
    return os.getenv("LOG_LEVEL", _LEVEL_BY_ENV.get(current_env(), "INFO"))


def _rotating_handler(path: Path, level: int = logging.NOTSET) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(path, maxBytes=_MAX_BYTES, backupCount=5, encoding="utf-8")
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(log_dir: Path | str = "logs") -> None:
    """Send records to stdout, ``ratings.log`` and (errors only) ``ratings_error.log``."""
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=get_log_level(),
        format="%(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            _rotating_handler(log_dir / _LOG_FILE),
            _rotating_handler(log_dir / _ERROR_LOG_FILE, logging.ERROR),
        ],
        force=True,
    )

    # httpx logs every client request at INFO
    for name in ("httpx", "httpcore", "asyncio"):
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_structlog() -> None:
    """Route structlog through stdlib logging; JSON in production/staging, console otherwise."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if current_env() in ("production", "staging"):
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.RichTracebackFormatter(max_frames=2))
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging() -> None:
    """Configure all logging for the application."""
    setup_stdlib_logging()
    setup_structlog()


def bind_request_context(**kwargs: Any) -> None:
    """Bind values (request id, product id, ...) to every later log line of this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
