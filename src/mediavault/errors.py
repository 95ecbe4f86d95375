"""
mediavault.errors

Application error taxonomy.

Responsibilities:
- Define the exceptions raised by the auth gate, the ingestion pipeline and repositories.
- Carry the HTTP status, a stable machine-readable code and optional per-item details.

All of these are translated into the failure envelope by `mediavault.api.errors`.
"""

from __future__ import annotations

from typing import Any

from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)


class AppError(Exception):
    status_code: int = HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"

    def __init__(self, message: str, *, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors


class Unauthenticated(AppError):
    status_code = HTTP_401_UNAUTHORIZED
    code = "unauthenticated"


class Forbidden(AppError):
    status_code = HTTP_403_FORBIDDEN
    code = "forbidden"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class NotFound(AppError):
    status_code = HTTP_404_NOT_FOUND
    code = "not_found"

    def __init__(self, entity: str, entity_id: Any) -> None:
        super().__init__(f"{entity} with ID {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(AppError):
    status_code = HTTP_400_BAD_REQUEST
    code = "validation_error"


class Conflict(AppError):
    status_code = HTTP_409_CONFLICT
    code = "conflict"


class PayloadTooLarge(AppError):
    status_code = 413
    code = "payload_too_large"


class PersistenceFailure(AppError):
    code = "persistence_failure"

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        if errors is None and cause is not None:
            errors = [{"message": str(cause)}]
        super().__init__(message, errors=errors)
        self.cause = cause


class AdmissionError(ValidationError):
    """
    Per-file rejection raised by an upload admission check.
    """

    def detail(self, *, file: str | None = None) -> dict[str, Any]:
        out: dict[str, Any] = {"message": self.message, "code": self.code}
        if file is not None:
            out["file"] = file
        return out


class UnsupportedType(AdmissionError):
    code = "unsupported_type"


class UnsupportedExtension(AdmissionError):
    code = "unsupported_extension"


class SizeExceeded(AdmissionError):
    code = "size_exceeded"

    def __init__(self, message: str, *, limit: int) -> None:
        super().__init__(message)
        self.limit = limit

    def detail(self, *, file: str | None = None) -> dict[str, Any]:
        out = super().detail(file=file)
        out["limit"] = self.limit
        return out


class ContentMismatch(AdmissionError):
    code = "content_mismatch"
