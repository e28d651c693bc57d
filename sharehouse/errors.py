"""Booking error taxonomy and the FastAPI handlers rendering it."""
from enum import Enum

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class ErrorKind(str, Enum):
    DATA_MISSING = "data.missing"
    DATA_INVALID = "data.invalid"
    NOT_FOUND = "resource.not.found"
    UNAUTHORIZED = "booking.unauthorized"
    CANNOT_BOOK_PAST = "booking.cannot.book.past"
    DURATION_INVALID = "booking.duration.wrong"
    OUTSIDE_WORKING_HOURS = "booking.outside.workinghours"
    CONFLICT = "booking.already.existing"
    QUOTA_EXCEEDED = "booking.too.many"
    STORAGE_ERROR = "storage.error"
    RATE_LIMITED = "request.rate.limited"


HTTP_STATUS = {
    ErrorKind.DATA_MISSING: status.HTTP_400_BAD_REQUEST,
    ErrorKind.DATA_INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorKind.CANNOT_BOOK_PAST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.DURATION_INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorKind.OUTSIDE_WORKING_HOURS: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.QUOTA_EXCEEDED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.STORAGE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
}


class SchedulerError(Exception):
    """A rejected booking operation, carrying a stable machine-readable kind."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.kind]

    def to_envelope(self) -> dict[str, str]:
        return {"errorCode": self.kind.value, "message": self.message}


def scheduler_error_handler(_: Request, exc: SchedulerError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_envelope())


def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({".".join(str(part) for part in error["loc"][1:]) for error in exc.errors()})
    error = SchedulerError(ErrorKind.DATA_INVALID, f"Invalid data: {', '.join(fields) or 'request'}")
    return JSONResponse(status_code=error.status_code, content=error.to_envelope())


def install_error_handlers(app: FastAPI) -> None:
    """Render booking errors and malformed requests with the response envelope."""

    app.add_exception_handler(SchedulerError, scheduler_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
