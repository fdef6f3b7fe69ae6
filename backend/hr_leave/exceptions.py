import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import DBAPIError

logger = logging.getLogger(__name__)


class ErrorDetail(BaseModel):
    """A single machine-readable problem with a request."""

    code: str
    message: str
    field: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    code: str
    detail: str | None = None
    errors: list[ErrorDetail] = []
    status_code: int


class AppError(Exception):
    """Base application exception."""

    default_code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        code: str | None = None,
        errors: list[ErrorDetail] | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.code = code or self.default_code
        self.errors = errors or []
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed input: dates, reason, leave type."""

    default_code = "VALIDATION_ERROR"

    def __init__(self, message: str, code: str | None = None, errors: list[ErrorDetail] | None = None) -> None:
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY, code, errors)


class NotFoundError(AppError):
    """Unknown request, employee or balance."""

    default_code = "NOT_FOUND"

    def __init__(self, message: str, code: str | None = None, errors: list[ErrorDetail] | None = None) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND, code, errors)


class ConflictError(AppError):
    """Overlapping approved leave, illegal state transition or insufficient balance."""

    default_code = "CONFLICT"

    def __init__(self, message: str, code: str | None = None, errors: list[ErrorDetail] | None = None) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT, code, errors)


class AuthorizationError(AppError):
    """The actor may not perform this operation."""

    default_code = "UNAUTHORIZED"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message, status.HTTP_403_FORBIDDEN, code)


class TransientError(AppError):
    """The underlying store is unavailable. Callers may retry."""

    default_code = "SERVICE_UNAVAILABLE"

    def __init__(self, message: str = "Service temporarily unavailable, please retry") -> None:
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            code=exc.code,
            detail=exc.message,
            errors=exc.errors,
            status_code=exc.status_code,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        ErrorDetail(
            code="VALIDATION_ERROR",
            message=str(err.get("msg", "Invalid value")),
            field=".".join(str(part) for part in err.get("loc", ()) if part != "body") or None,
        )
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            code="VALIDATION_ERROR",
            detail="Request validation failed",
            errors=errors,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(),
    )


async def _database_exception_handler(request: Request, exc: DBAPIError) -> JSONResponse:
    # Driver text can carry SQL and schema names; keep it in the log only.
    logger.exception("Unhandled database error on %s %s", request.method, request.url.path)
    return await _app_exception_handler(request, TransientError())


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DBAPIError, _database_exception_handler)  # type: ignore[arg-type]
