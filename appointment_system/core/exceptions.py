"""
Application error taxonomy.

Every error carries a short human-readable ``message``; validation and
uniqueness failures also carry a per-field ``errors`` mapping so forms can
report them inline.
"""

from typing import Dict, Optional

from fastapi import status


class AppError(Exception):
    """Base class for all application exceptions."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        errors: Optional[Dict[str, str]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.errors = errors or {}
        super().__init__(self.message)


class ValidationFailed(AppError):
    """A required field is missing or malformed."""

    def __init__(self, message: str = "Validation failed.", errors: Optional[Dict[str, str]] = None):
        super().__init__(message, status.HTTP_400_BAD_REQUEST, errors)


class EntityNotFound(AppError):
    def __init__(self, message: str = "Entity not found."):
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class DuplicateValue(AppError):
    """A unique field (username, role name) is already taken."""

    def __init__(self, field: str, message: str):
        super().__init__(message, status.HTTP_400_BAD_REQUEST, {field: message})
        self.field = field


class InvalidCredentials(AppError):
    # Same message for unknown user and wrong password
    def __init__(self, message: str = "Invalid username or password."):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED)


class PendingApproval(AppError):
    def __init__(self, message: str = "Your account is pending admin approval."):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED)


class AccountDisabled(AppError):
    def __init__(self, message: str = "Your account has been deactivated."):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED)
