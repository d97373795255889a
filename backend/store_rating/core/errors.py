# store_rating/core/errors.py
"""
Error taxonomy for the API.

Every failure a handler can report is one of the classes below. Each carries
an HTTP status, a machine-readable code and a human-readable message; the
handlers registered by `install_exception_handlers` turn them into a uniform
JSON envelope:

    {"error": {"kind": "not_found", "code": "STORE_NOT_FOUND", "message": "Store not found"}}
"""
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("uvicorn.error")


class AppError(Exception):
    """Base class for errors that map to a well-defined HTTP response."""

    status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    kind: str = "internal"
    default_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[list[dict[str, Any]]] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        body: dict[str, Any] = {"kind": self.kind, "code": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return {"error": body}


class ValidationError(AppError):
    status = status.HTTP_400_BAD_REQUEST
    kind = "validation_error"
    default_code = "VALIDATION_FAILED"


class Unauthenticated(AppError):
    status = status.HTTP_401_UNAUTHORIZED
    kind = "unauthenticated"
    default_code = "AUTH_REQUIRED"


class Forbidden(AppError):
    status = status.HTTP_403_FORBIDDEN
    kind = "forbidden"
    default_code = "FORBIDDEN_ROLE"


class NotFound(AppError):
    status = status.HTTP_404_NOT_FOUND
    kind = "not_found"
    default_code = "NOT_FOUND"


class Conflict(AppError):
    # Public API reports duplicates and invariant violations as 400
    status = status.HTTP_400_BAD_REQUEST
    kind = "conflict"
    default_code = "CONFLICT"


class Internal(AppError):
    status = status.HTTP_500_INTERNAL_SERVER_ERROR
    kind = "internal"
    default_code = "INTERNAL_ERROR"


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    details = []
    for err in exc.errors():
        # loc looks like ("body", "password") or ("query", "page")
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        msg = err.get("msg", "Invalid value")
        # pydantic prefixes messages raised from validators with "Value error, "
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        details.append({"field": ".".join(loc) or "request", "message": msg})
    return details


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    err = ValidationError("Validation failed", details=_field_errors(exc))
    return JSONResponse(status_code=err.status, content=err.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("[errors] Unhandled error on %s %s", request.method, request.url.path)
    err = Internal("Internal server error")
    return JSONResponse(status_code=err.status, content=err.to_dict())


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
