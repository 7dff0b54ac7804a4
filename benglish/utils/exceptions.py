"""Custom exception classes and error handling utilities."""
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger


class BenglishException(Exception):
    """Base exception for the application."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    headers: Optional[Dict[str, str]] = None

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class BadRequestError(BenglishException):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(BenglishException):
    """Missing, invalid or expired credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    headers = {"WWW-Authenticate": "Bearer"}


class ForbiddenError(BenglishException):
    """Valid credentials for an account that may not sign in."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(BenglishException):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(BenglishException):
    """Duplicate value for a unique field."""

    status_code = status.HTTP_409_CONFLICT


class ServiceUnavailableError(BenglishException):
    """An upstream integration could not be reached."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


async def handle_application_error(request: Request, exc: BenglishException) -> JSONResponse:
    """Render a domain error as ``{"detail": message}``."""

    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.message)
    else:
        logger.warning(
            "Request rejected", path=request.url.path, status=exc.status_code, error=exc.message
        )
    content: Dict[str, Any] = {"detail": exc.message}
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report request validation failures as bad requests."""

    logger.warning("Validation failed", path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_errors(exc), "message": "Validation failed"},
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log everything, reveal nothing."""

    logger.exception("Unhandled error", path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Strip non-serializable context (e.g. raised exceptions) from pydantic errors."""

    errors = []
    for error in exc.errors():
        entry = {key: value for key, value in error.items() if key != "ctx"}
        if "ctx" in error:
            entry["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        errors.append(entry)
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BenglishException, handle_application_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
