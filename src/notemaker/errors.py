from abc import ABC
from typing import Any


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class ValidationError(UserError):
    """Raised when user input fails validation.

    Field-level details, when known, are carried in ``errors`` as
    ``{"field": ..., "message": ...}`` items.
    """

    def __init__(self, message: str = "Validation failed", errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class MissingFieldsError(ValidationError):
    """Raised when required fields are absent from a request."""


class InvalidPendingError(ValidationError):
    """Raised when a pending registration bundle is tampered with or expired."""

    def __init__(self, message: str = "Signup session is invalid or has expired, please sign up again") -> None:
        super().__init__(message)


class DuplicateEmailError(UserError):
    """Raised when signing up with an email that already belongs to a user."""

    def __init__(self, message: str = "User with this email already exists") -> None:
        super().__init__(message)


class OTPError(UserError):
    """Base class for one-time passcode failures."""


class InvalidOTPError(OTPError):
    def __init__(self, message: str = "Invalid OTP") -> None:
        super().__init__(message)


class OTPExpiredError(OTPError):
    def __init__(self, message: str = "OTP has expired") -> None:
        super().__init__(message)


class OTPAlreadyUsedError(OTPError):
    def __init__(self, message: str = "OTP has already been used") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    """Same message for unknown email and wrong password."""

    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message)


class MissingTokenError(AuthenticationError):
    def __init__(self, message: str = "Token required") -> None:
        super().__init__(message)


class AccessDeniedError(UserError):
    """Raised when a presented credential is refused."""


class InvalidTokenError(AccessDeniedError):
    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message)


class SessionNotFoundError(AccessDeniedError):
    def __init__(self, message: str = "Invalid or expired refresh token") -> None:
        super().__init__(message)


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Document not found") -> None:
        super().__init__(message)


class UserNotFoundError(NotFoundError):
    def __init__(self, message: str = "User not found") -> None:
        super().__init__(message)


class NoteNotFoundError(NotFoundError):
    def __init__(self, message: str = "Note not found") -> None:
        super().__init__(message)


class UpstreamProviderError(UserError):
    """Raised when the OAuth identity provider round trip fails."""


class MissingCodeError(UpstreamProviderError):
    def __init__(self, message: str = "Missing authorization code") -> None:
        super().__init__(message)


class ExchangeFailedError(UpstreamProviderError):
    def __init__(self, message: str = "Failed to exchange Google code") -> None:
        super().__init__(message)


class ProfileFetchFailedError(UpstreamProviderError):
    def __init__(self, message: str = "Failed to fetch Google profile") -> None:
        super().__init__(message)


class MissingEmailError(UpstreamProviderError):
    def __init__(self, message: str = "Google profile missing email") -> None:
        super().__init__(message)
