"""Translate domain and request errors into JSON error responses.

Every error is logged here, once, and answered with ``{"error": <message>}``.
"""

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ValidationError
from protean.integrations.fastapi import register_exception_handlers

from ratings.api.schemas import ErrorResponse
from ratings.exceptions import RatingsError, StorageUnavailableError

logger = structlog.get_logger(__name__)


def error_message(exc: ValidationError) -> str:
    """Flatten protean's ``{field: [messages]}`` into one sentence."""
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        flat = [str(msg) for msgs in messages.values() for msg in (msgs if isinstance(msgs, list) else [msgs])]
        if flat:
            return "; ".join(flat)
    return str(exc)


@contextmanager
def storage_errors(message: str) -> Iterator[None]:
    """Re-raise unexpected store failures as StorageUnavailableError(message).

    Validation and other RatingsError exceptions pass through untouched.
    """
    try:
        yield
    except (ValidationError, RatingsError):
        raise
    except Exception as exc:
        logger.exception(message, error=str(exc))
        raise StorageUnavailableError(message) from exc


async def _validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    message = error_message(exc)
    logger.info("Request rejected", path=request.url.path, error=message)
    return JSONResponse(status_code=400, content=ErrorResponse(error=message).model_dump())


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ())[1:])}: {err.get('msg')}" for err in errors
    ) or "Invalid request"
    logger.info("Malformed request", path=request.url.path, error=message)
    return JSONResponse(status_code=400, content=ErrorResponse(error=message).model_dump())


async def _ratings_error_handler(request: Request, exc: RatingsError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.message)
    else:
        logger.info("Request refused", path=request.url.path, status_code=exc.status_code, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=ErrorResponse(error=exc.message).model_dump())


def register_error_handlers(app: FastAPI) -> None:
    """Install protean's default handlers, then the Ratings-specific ones."""
    register_exception_handlers(app)
    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(RatingsError, _ratings_error_handler)
