"""
Unit tests for error categories and their HTTP mapping.
"""

import pytest

from filevault.domain.errors import (
    ERROR_MESSAGES,
    ErrorCategory,
    FileObjectNotFoundError,
    InvalidPasswordError,
    InvalidUploadError,
    PasswordRequiredError,
    StorageUnavailableError,
    create_error_response,
    error_response_for,
)


def test_every_category_has_a_message():
    assert set(ERROR_MESSAGES) == set(ErrorCategory)


@pytest.mark.parametrize(
    "error,category,status",
    [
        (FileObjectNotFoundError("x"), "file_not_found", 404),
        (PasswordRequiredError("x"), "password_required", 400),
        (InvalidPasswordError("x"), "invalid_password", 401),
        (StorageUnavailableError("x"), "storage_unavailable", 503),
        (InvalidUploadError("x"), "invalid_request", 400),
    ],
)
def test_domain_errors_map_to_status(error, category, status):
    body, status_code = error_response_for(error)
    assert status_code == status
    assert body["error"] == category
    assert set(body) == {"error", "title", "message", "action"}


def test_technical_message_is_not_exposed():
    body, _ = create_error_response(
        ErrorCategory.SYSTEM_ERROR, "Traceback: secret internals", status_code=500
    )
    assert "secret internals" not in str(body)


def test_original_error_is_kept():
    cause = OSError("disk")
    assert StorageUnavailableError("x", original_error=cause).original_error is cause
