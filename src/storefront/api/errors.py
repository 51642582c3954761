"""Translate domain and application errors into JSON responses.

Every error body has the same shape: ``{"error": <message>,
"error_type": <exception class name>}``, plus ``messages`` for validation
failures.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.errors import StorefrontError

logger = structlog.get_logger(__name__)


def error_response(status_code: int, message: str, error_type: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "error_type": error_type, **extra},
    )


def _flatten(messages: dict) -> str:
    return "; ".join(
        f"{field}: {', '.join(str(m) for m in (errors if isinstance(errors, list) else [errors]))}"
        for field, errors in messages.items()
    )


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error_type=type(exc).__name__, error=exc.message)
    return error_response(exc.status_code, exc.message, type(exc).__name__)


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:  # noqa: ARG001
    return error_response(400, _flatten(exc.messages), "ValidationError", messages=exc.messages)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: ARG001
    details = jsonable_encoder(exc.errors())
    message = "; ".join(f"{'.'.join(str(p) for p in d.get('loc', []))}: {d.get('msg')}" for d in details)
    return error_response(400, message or "Invalid request", "ValidationError", messages=details)


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:  # noqa: ARG001
    return error_response(404, str(exc) or "Not found", "NotFoundError")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
