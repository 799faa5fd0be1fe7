"""
api/errors.py -- Mapping from service failures to HTTP error responses.

Every error the API emits, whether it comes from a service Failure, a request
body that would not parse, an HTTPException, or an unhandled crash, has the
same body shape (api.models.ErrorResponse):

    {timestamp, status, error, message, path[, fieldErrors]}

_STATUS_BY_KIND is the single place that decides which HTTP status an
ErrorKind becomes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from http import HTTPStatus

from fastapi import Request
from fastapi.responses import JSONResponse

from api.models import ErrorResponse
from core.results import ErrorKind, Failure

_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.DUPLICATE_USERNAME: 409,
    ErrorKind.USER_NOT_FOUND: 401,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.POST_NOT_FOUND: 404,
    ErrorKind.PASSWORD_MISMATCH: 400,
}

VALIDATION_FAILED = "Validation Failed"


def status_for(kind: ErrorKind) -> int:
    return _STATUS_BY_KIND[kind]


def error_response(
    request: Request,
    status: int,
    message: str,
    error: str | None = None,
    field_errors: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the standard error body. error defaults to the HTTP reason phrase."""
    body = ErrorResponse(
        timestamp=datetime.now(timezone.utc),
        status=status,
        error=error or HTTPStatus(status).phrase,
        message=message,
        path=request.url.path,
        fieldErrors=field_errors or None,
    )
    return JSONResponse(
        status_code=status,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


def failure_response(request: Request, failure: Failure, headers: dict[str, str] | None = None) -> JSONResponse:
    """Translate a service Failure into its HTTP error response."""
    status = status_for(failure.kind)
    error = VALIDATION_FAILED if failure.kind is ErrorKind.INVALID_INPUT else None
    return error_response(
        request,
        status,
        failure.message,
        error=error,
        field_errors=failure.field_errors,
        headers=headers,
    )
