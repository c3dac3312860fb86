"""
Custom exceptions and error handlers for consistent error responses.

Provides standardized error codes and global exception handlers.
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from typing import Any, Dict

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ValidationError(AppException):
    """Raised when a required field is missing, blank or malformed."""

    def __init__(self, field: str, message: str = None, error_code: str = "ERR_VALIDATION_001"):
        self.field = field
        super().__init__(
            message=message or f"{field} is required",
            error_code=error_code,
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"field": field}
        )


class InvalidLocationIndexError(ValidationError):
    """Raised when a location index falls outside the tracking's route."""

    def __init__(self, index: int, route_length: int):
        self.index = index
        self.route_length = route_length
        super().__init__(
            field="currentLocationIndex",
            message=f"currentLocationIndex {index} is outside the route (0..{route_length - 1})",
            error_code="ERR_VALIDATION_002"
        )
        self.details.update({"index": index, "max_index": route_length - 1})


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class PersistenceError(AppException):
    """Raised when the storage layer fails. The cause is logged, never returned."""

    def __init__(self, message: str = "A storage error occurred"):
        super().__init__(
            message=message,
            error_code="ERR_PERSISTENCE_001",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


class TrackingIdConflictError(PersistenceError):
    """Raised when a generated tracking ID is already taken."""

    def __init__(self, tracking_id: str):
        self.tracking_id = tracking_id
        super().__init__(message=f"Tracking ID {tracking_id} already exists")


class AuthenticationError(AppException):
    """Raised for authentication failures."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(
            message=message,
            error_code="ERR_AUTH_001",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class UnsupportedMediaTypeError(AppException):
    """Raised when an uploaded file is not an accepted image type."""

    def __init__(self, content_type: str, allowed: list):
        super().__init__(
            message=f"Unsupported file type '{content_type}'",
            error_code="ERR_UPLOAD_001",
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            details={"content_type": content_type, "allowed": allowed}
        )


class PayloadTooLargeError(AppException):
    """Raised when an uploaded file exceeds the size ceiling."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            message=f"File is too large ({size} bytes, limit {limit})",
            error_code="ERR_UPLOAD_002",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            details={"size": size, "limit": limit}
        )


class StorageUnavailableError(AppException):
    """Raised when the image storage backend is failing."""

    def __init__(self):
        super().__init__(
            message="Image storage is temporarily unavailable",
            error_code="ERR_UPLOAD_003",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        401: "ERR_UNAUTHORIZED",
        403: "ERR_FORBIDDEN",
        404: "ERR_NOT_FOUND",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": exc.detail,
            "details": {}
        },
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "ERR_VALIDATION",
            "message": "Validation error",
            "details": {
                "errors": jsonable_errors(exc)
            }
        }
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold the raw exception object
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception(
        "Unhandled exception: %s", type(exc).__name__,
        extra={"path": request.url.path, "method": request.method}
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": {}
        }
    )
