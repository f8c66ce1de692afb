"""Exception types and the FastAPI handlers that turn them into JSON responses."""

import logging

import pydantic
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class UploadRelayError(Exception):
    """Base class for errors raised by the upload relay."""

    error = "Upload failed"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UploadValidationError(UploadRelayError):
    """The request cannot be processed as sent (missing or oversized file)."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, error: str, message: str):
        super().__init__(message)
        self.error = error


class StorageError(UploadRelayError):
    """The object store rejected or failed an operation."""


class LedgerUpdateError(UploadRelayError):
    """Finding, reading or writing the upload ledger failed."""


def error_body(error: str, message: str) -> dict:
    return {"error": error, "message": message}


async def handle_upload_relay_errors(request: Request, exc: UploadRelayError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.error, exc.message),
    )


async def handle_pydantic_validation_errors(
    request: Request, exc: RequestValidationError | pydantic.ValidationError
) -> JSONResponse:
    errors = exc.errors()
    message = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}" for error in errors
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Invalid request", message),
    )


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that goes unhandled by a more specific exception handler."""
    try:
        return await call_next(request)
    except Exception as err:  # pylint: disable=broad-except
        logger.exception(err)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("Internal server error", str(err)),
        )
