"""Shared exceptions for service layer operations."""
from enum import StrEnum


class FailureReason(StrEnum):
    """Why a credential operation failed; stable across message wording."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    INVALID_CREDENTIALS = "invalid_credentials"
    REGISTRATION_FAILED = "registration_failed"
    DUPLICATE_EMAIL = "duplicate_email"
    INVALID_OR_EXPIRED_TOKEN = "invalid_or_expired_token"
    DEPENDENCY_FAILURE = "dependency_failure"


class CredentialError(Exception):
    """
    Base exception for account and credential operations.

    Routers map each subclass to one HTTP status; `reason` lets callers branch
    without matching on message text.
    """

    reason: FailureReason

    def __init__(self, message: str) -> None:
        super().__init__(message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CredentialError):
            return NotImplemented
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class ValidationError(CredentialError):
    """Raised when input is empty or malformed."""

    reason = FailureReason.VALIDATION


class NotFoundError(CredentialError):
    """Raised when the referenced user does not exist."""

    reason = FailureReason.NOT_FOUND

    def __init__(self, message: str = "User not found") -> None:
        super().__init__(message)


class InvalidCredentialsError(CredentialError):
    """
    Raised on a failed login.

    Unknown email and wrong password raise the same message so the response
    cannot be used to probe which emails are registered.
    """

    reason = FailureReason.INVALID_CREDENTIALS

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class RegistrationFailedError(CredentialError):
    """Raised when a new account could not be created."""

    reason = FailureReason.REGISTRATION_FAILED


class DuplicateEmailError(RegistrationFailedError):
    """Raised when the email is already registered."""

    reason = FailureReason.DUPLICATE_EMAIL

    def __init__(self) -> None:
        super().__init__("Email already registered")


class InvalidOrExpiredTokenError(CredentialError):
    """Raised for a reset token that is forged, expired, malformed or already used."""

    reason = FailureReason.INVALID_OR_EXPIRED_TOKEN

    def __init__(self) -> None:
        super().__init__("Invalid or expired token")


class DependencyFailureError(CredentialError):
    """Raised when the cache, database or mail server cannot complete a required step."""

    reason = FailureReason.DEPENDENCY_FAILURE


class GreetingNotFoundError(Exception):
    """Raised when a greeting does not exist or belongs to another user."""

    def __init__(self, greeting_id: int) -> None:
        self.greeting_id = greeting_id
        super().__init__(f"Greeting not found: {greeting_id}")
