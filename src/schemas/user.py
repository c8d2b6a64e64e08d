"""Pydantic schemas for account endpoints."""
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from schemas.validators import normalize_email, validate_name, validate_password


class UserProfile(BaseModel):
    """
    Public projection of a user.

    Returned by the API and stored in the profile cache. Never carries
    password material.
    """

    model_config = ConfigDict(from_attributes=True)

    first_name: str
    last_name: str
    email: str


class RegisterRequest(BaseModel):
    """Schema for registering a new account."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str
    password: str = Field(..., min_length=1)

    @field_validator("first_name", "last_name")
    @classmethod
    def check_name(cls, v: str, info: ValidationInfo) -> str:
        """Trim names and reject blanks."""
        return validate_name(v, info.field_name)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        """Normalize email to lowercase and validate its format."""
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        """Bound password length."""
        return validate_password(v)


class LoginRequest(BaseModel):
    """
    Schema for logging in.

    Only trimmed here; format checks would let callers tell a malformed
    address apart from an unknown one.
    """

    email: str = Field(..., max_length=255)
    password: str = Field(..., max_length=1024)


class LoginResponse(BaseModel):
    """Session token issued on successful login."""

    access_token: str
    token_type: str = "bearer"


class ForgotPasswordRequest(BaseModel):
    """Schema for requesting a password reset email."""

    email: str = Field(..., max_length=255)


class ResetPasswordRequest(BaseModel):
    """Schema for completing a password reset. The token travels in the query string."""

    new_password: str = Field(..., min_length=1)

    @field_validator("new_password")
    @classmethod
    def check_password(cls, v: str) -> str:
        """Bound password length."""
        return validate_password(v)


class OperationResponse(BaseModel):
    """Outcome of an account operation without a payload."""

    success: bool
    message: str
