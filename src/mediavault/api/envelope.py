"""
mediavault.api.envelope

Response envelope shared by every `/api` endpoint.

- success: {data, message, path, statusCode}
- failure: {statusCode, message, path, errors?, timestamp}
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.requests import Request
from starlette.status import HTTP_200_OK


def success(
    request: Request,
    data: Any,
    *,
    message: str,
    status_code: int = HTTP_200_OK,
) -> JSONResponse:
    body = {
        "data": jsonable_encoder(data),
        "message": message,
        "path": request.url.path,
        "statusCode": status_code,
    }
    return JSONResponse(status_code=status_code, content=body)


def failure(
    request: Request,
    *,
    status_code: int,
    message: str,
    errors: list[dict[str, Any]] | None = None,
) -> JSONResponse:
    body: dict[str, Any] = {
        "statusCode": status_code,
        "message": message,
        "path": request.url.path,
    }
    if errors:
        body["errors"] = jsonable_encoder(errors)
    body["timestamp"] = datetime.now(tz=UTC).isoformat()
    return JSONResponse(status_code=status_code, content=body)
