"""
Application error taxonomy and FastAPI exception handlers
"""

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class ValidationError(AppError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST

    @classmethod
    def from_pydantic(cls, exc: Any, message: str = "Validation failed") -> "ValidationError":
        """Build from a pydantic ``ValidationError`` or a list of its error dicts."""
        raw_errors = exc.errors() if hasattr(exc, "errors") else exc
        errors = []
        for error in raw_errors:
            location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
            text = str(error.get("msg", "Invalid value"))
            errors.append({
                "field": ".".join(location) or None,
                "message": text.removeprefix("Value error, "),
            })
        return cls(message, errors=errors)


class AuthenticationError(AppError):
    """Credentials or token rejected."""

    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(AppError):
    """Unknown id, slug or file."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Unique key collision that could not be resolved."""

    status_code = status.HTTP_400_BAD_REQUEST


class StorageError(AppError):
    """File storage I/O failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class UnexpectedError(AppError):
    """Anything else; details are logged, not returned."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_body(exc: AppError) -> Dict[str, Any]:
    body: Dict[str, Any] = {"detail": exc.message}
    if exc.errors:
        body["errors"] = exc.errors
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        detail = "Internal server error" if isinstance(exc, UnexpectedError) else exc.message
        return JSONResponse(status_code=exc.status_code, content={"detail": detail})
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc), headers=headers)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return await app_error_handler(request, ValidationError.from_pydantic(exc))


def setup_exception_handlers(app: FastAPI) -> None:
    """Register handlers translating domain errors into JSON responses."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
