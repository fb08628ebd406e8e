# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class ToliException(Exception):
    """
    Base exception for the Patwa Toli API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "TOLI_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "success": False,
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Media Validation Exceptions (user-correctable)
# =============================================================================

class MediaValidationError(ToliException):
    """Raised when an upload violates the policy of its asset class."""

    def __init__(
        self,
        message: str,
        code: str = "MEDIA_VALIDATION_ERROR",
        status_code: int = 400,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=status_code,
            suggestion=suggestion,
            details=details,
        )


class UnsupportedMediaTypeError(MediaValidationError):
    """Raised when the declared MIME type is not allowed for the asset class."""

    def __init__(self, mime_type: str, asset_class: str, allowed: list[str]):
        super().__init__(
            message=f"Unsupported media type for {asset_class}: {mime_type or 'unknown'}",
            code="UNSUPPORTED_MEDIA_TYPE",
            status_code=400,
            suggestion=f"Only these media types are accepted: {', '.join(allowed)}",
            details={"mime_type": mime_type, "asset_class": asset_class, "allowed_types": allowed},
        )


class PayloadTooLargeError(MediaValidationError):
    """Raised when an upload exceeds the size limit of its asset class."""

    def __init__(self, size_bytes: int, max_bytes: int, asset_class: str):
        size_mb = size_bytes / (1024 * 1024)
        max_mb = max_bytes / (1024 * 1024)
        super().__init__(
            message=f"File too large: {size_mb:.1f}MB (max for {asset_class}: {max_mb:.0f}MB)",
            code="PAYLOAD_TOO_LARGE",
            status_code=413,
            suggestion=f"Upload a file smaller than {max_mb:.0f}MB",
            details={"size_bytes": size_bytes, "max_bytes": max_bytes, "asset_class": asset_class},
        )


class MissingMediaError(ToliException):
    """Raised when an operation requires a media file and none was sent."""

    def __init__(self, field_name: str):
        super().__init__(
            message=f"A media file is required in field '{field_name}'",
            code="MISSING_MEDIA",
            status_code=400,
            suggestion=f"Attach an image or video as multipart field '{field_name}'",
            details={"field": field_name},
        )


# =============================================================================
# Remote Asset Store Exceptions
# =============================================================================

class UploadFailedError(ToliException):
    """Raised when the remote asset store could not accept an upload."""

    def __init__(self, error: str, folder: str | None = None):
        super().__init__(
            message=f"Failed to upload media: {error}",
            code="UPLOAD_FAILED",
            status_code=502,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error, "folder": folder} if folder else {"error": error},
        )


class DeletionFailedError(ToliException):
    """
    Raised by asset store clients when a remote object could not be removed.

    Never reaches an API response: the media lifecycle coordinator logs and
    swallows it.
    """

    def __init__(self, handle: str, error: str):
        super().__init__(
            message=f"Failed to delete remote media {handle}: {error}",
            code="DELETION_FAILED",
            status_code=500,
            details={"handle": handle, "error": error},
        )


# =============================================================================
# Entity Exceptions
# =============================================================================

class EntityNotFoundError(ToliException):
    """Raised when an entity ID doesn't exist."""

    def __init__(self, kind: str, entity_id: str):
        super().__init__(
            message=f"{kind.capitalize()} not found: {entity_id}",
            code=f"{kind.upper()}_NOT_FOUND",
            status_code=404,
            suggestion=f"Check that the {kind} id is correct",
            details={"kind": kind, "id": entity_id},
        )


class ForbiddenError(ToliException):
    """Raised when the caller may not modify an entity."""

    def __init__(self, kind: str, entity_id: str):
        super().__init__(
            message=f"Not authorized to modify this {kind}",
            code="FORBIDDEN",
            status_code=403,
            suggestion=f"Only the owner of the {kind} or an admin can do this",
            details={"kind": kind, "id": entity_id},
        )


class InvalidRequestError(ToliException):
    """Raised when a request is well-formed but not allowed as sent."""

    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(
            message=message,
            code="INVALID_REQUEST",
            status_code=400,
            suggestion=suggestion,
        )


class EntityStoreError(ToliException):
    """Raised when the document store rejects or fails an operation."""

    def __init__(self, operation: str, kind: str, error: str):
        super().__init__(
            message=f"Failed to {operation} {kind}: {error}",
            code="ENTITY_STORE_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"operation": operation, "kind": kind, "error": error},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def toli_exception_handler(
    request: Request,
    exc: ToliException
) -> JSONResponse:
    """
    Convert ToliException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle Pydantic validation errors."""
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": str(exc)
        }
    )
