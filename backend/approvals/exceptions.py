from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

if TYPE_CHECKING:
    from approvals.models.enums import CancelState, RequestStatus


class ErrorState(BaseModel):
    """Resolved state attached to a 409 so callers can render it without a re-read."""

    status: str
    cancel_state: str


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int
    state: ErrorState | None = None


class AppError(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

    def error_state(self) -> ErrorState | None:
        return None


class NotFoundError(AppError):
    """Unknown request id."""

    def __init__(self, message: str = "Request not found") -> None:
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


class ForbiddenError(AppError):
    """Actor lacks the role or ownership needed for the attempted transition."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN)


class ValidationFailedError(AppError):
    """Payload passed schema validation but is not acceptable to the workflow."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


class InvalidStateError(AppError):
    """A guard failed because the resolved status does not permit the transition."""

    def __init__(self, message: str, current_status: RequestStatus, cancel_state: CancelState) -> None:
        self.current_status = current_status
        self.cancel_state = cancel_state
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)

    def error_state(self) -> ErrorState | None:
        return ErrorState(status=self.current_status.value, cancel_state=self.cancel_state.value)


class IdempotencyConflictError(AppError):
    """An idempotency key was replayed with a different request body."""

    def __init__(self, message: str = "Idempotency key already used for a different request") -> None:
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


class StorageError(AppError):
    """The storage layer failed; the transaction was rolled back."""

    def __init__(self, message: str = "Storage failure, transaction rolled back") -> None:
        super().__init__(message, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
            state=exc.error_state(),
        ).model_dump(exclude_none=True),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            detail=str(exc.errors()),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(exclude_none=True),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
