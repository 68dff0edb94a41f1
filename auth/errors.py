"""
Error taxonomy for the authentication flow.

Every error carries the HTTP status it maps to and the message that is
safe to show to the caller.  Messages for credential and token failures
are deliberately generic.
"""

from __future__ import annotations

from typing import Dict, List, Optional


class AuthError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    default_message: str = "Server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthError):
    """Input failed shape validation; ``errors`` holds per-field messages."""

    status_code = 400
    default_message = "Validation error"

    def __init__(
        self,
        errors: List[Dict[str, str]],
        message: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.errors = errors


class DuplicateEmailError(AuthError):
    status_code = 400
    default_message = "User with this email already exists"


class InvalidCredentialsError(AuthError):
    status_code = 401
    default_message = "Invalid credentials"


class Unauthorized(AuthError):
    status_code = 401
    default_message = "Unauthorized - invalid token"


class NotFound(AuthError):
    status_code = 404
    default_message = "User not found"


class InternalError(AuthError):
    status_code = 500
    default_message = "Server error"
