"""
mediavault.api.errors

Exception-to-response mapping for the whole app.

Responsibilities:
- Translate `AppError`, Starlette HTTP errors, request validation errors and
  unexpected exceptions into the failure envelope.
- Log server-side failures with their cause.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import Response
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

from mediavault.api.envelope import failure
from mediavault.errors import AppError
from mediavault.observability.logging import get_logger

log = get_logger(__name__)


async def _app_error(request: Request, exc: AppError) -> Response:
    if exc.status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        log.error("request_failed", code=exc.code, message=exc.message, cause=repr(exc.__cause__))
    return failure(request, status_code=exc.status_code, message=exc.message, errors=exc.errors)


async def _http_error(request: Request, exc: StarletteHTTPException) -> Response:
    return failure(request, status_code=exc.status_code, message=str(exc.detail))


async def _request_validation_error(request: Request, exc: RequestValidationError) -> Response:
    errors = [
        {"message": f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"}
        for err in exc.errors()
    ]
    return failure(
        request,
        status_code=HTTP_400_BAD_REQUEST,
        message="Request validation failed",
        errors=errors,
    )


async def _unhandled(request: Request, exc: Exception) -> Response:
    log.exception("unhandled_exception")
    return failure(
        request,
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        message="Internal server error",
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(Exception, _unhandled)
