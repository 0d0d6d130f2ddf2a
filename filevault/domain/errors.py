"""
Error Handling Module

Defines domain exceptions and error categories for the application.
Domain exceptions are pure and have no external dependencies.
Application exceptions carry user-facing messages for HTTP responses.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    FILE_NOT_FOUND = "file_not_found"
    PASSWORD_REQUIRED = "password_required"
    INVALID_PASSWORD = "invalid_password"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    INVALID_REQUEST = "invalid_request"
    FILE_TOO_LARGE = "file_too_large"
    FORBIDDEN = "forbidden"
    SYSTEM_ERROR = "system_error"


# User-friendly error messages with actionable guidance
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.FILE_NOT_FOUND: {
        "title": "File Not Found",
        "message": "The requested file does not exist, has expired or was deleted.",
        "action": "Ask the sender to upload the file again.",
    },
    ErrorCategory.PASSWORD_REQUIRED: {
        "title": "Password Required",
        "message": "This file is protected by a password.",
        "action": "Provide the password with the 'pass' query parameter.",
    },
    ErrorCategory.INVALID_PASSWORD: {
        "title": "Invalid Password",
        "message": "The supplied password does not match this file.",
        "action": "Check the password and try again.",
    },
    ErrorCategory.STORAGE_UNAVAILABLE: {
        "title": "Storage Unavailable",
        "message": "The file could not be stored or read right now.",
        "action": "Please try again later.",
    },
    ErrorCategory.INVALID_REQUEST: {
        "title": "Invalid Request",
        "message": "The request is missing required information or contains invalid data.",
        "action": "Please check your input and try again.",
    },
    ErrorCategory.FILE_TOO_LARGE: {
        "title": "File Too Large",
        "message": "The uploaded file exceeds the maximum allowed size.",
        "action": "Upload a smaller file.",
    },
    ErrorCategory.FORBIDDEN: {
        "title": "Forbidden",
        "message": "You are not allowed to perform this operation.",
        "action": "",
    },
    ErrorCategory.SYSTEM_ERROR: {
        "title": "System Error",
        "message": "An unexpected error occurred while processing your request.",
        "action": "Please try again later. If the problem persists, contact support.",
    },
}


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Domain exceptions are pure and have no external dependencies.
    They can optionally wrap original errors for context.
    """

    category = ErrorCategory.SYSTEM_ERROR
    http_status_code = 500

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


class FileObjectNotFoundError(DomainError):
    """Raised when no record matches an id, or its blob is gone."""

    category = ErrorCategory.FILE_NOT_FOUND
    http_status_code = 404


class PasswordRequiredError(DomainError):
    """Raised when a protected file is accessed without a password."""

    category = ErrorCategory.PASSWORD_REQUIRED
    http_status_code = 400


class InvalidPasswordError(DomainError):
    """Raised when the supplied password does not match the stored hash."""

    category = ErrorCategory.INVALID_PASSWORD
    http_status_code = 401


class StorageUnavailableError(DomainError):
    """
    Raised when a file cannot be durably recorded or read.

    Wraps backend failures (Redis connection errors, disk I/O errors).
    """

    category = ErrorCategory.STORAGE_UNAVAILABLE
    http_status_code = 503


class InvalidUploadError(DomainError):
    """Raised when an upload carries no content."""

    category = ErrorCategory.INVALID_REQUEST
    http_status_code = 400


# ============================================================================
# Application Layer Exceptions
# ============================================================================

class ApplicationError(Exception):
    """
    Base application error with category and user-friendly messaging.

    Bridges domain errors with user-facing error messages and HTTP responses.
    """

    def __init__(
        self,
        category: ErrorCategory,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.category = category
        self.technical_message = technical_message or ""
        self.context = context or {}

        error_info = ERROR_MESSAGES.get(
            category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
        )
        self.title = error_info["title"]
        self.message = error_info["message"]
        self.action = error_info["action"]

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for API response."""
        return {
            "error": self.category.value,
            "title": self.title,
            "message": self.message,
            "action": self.action,
        }


def create_error_response(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 400,
) -> tuple[Dict[str, Any], int]:
    """
    Create a structured error response for API endpoints.

    Args:
        category: Error category
        technical_message: Technical error details for logging
        context: Additional context information
        status_code: HTTP status code

    Returns:
        Tuple of (error_dict, status_code)
    """
    error = ApplicationError(category, technical_message, context)
    return error.to_dict(), status_code


def error_response_for(error: DomainError) -> tuple[Dict[str, Any], int]:
    """Map a domain exception to its structured response and status code."""
    return create_error_response(
        error.category, str(error), status_code=error.http_status_code
    )
