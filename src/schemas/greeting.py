"""Pydantic schemas for greeting endpoints."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_MESSAGE_LENGTH = 2000


def _strip_message(value: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise ValueError("Message cannot be empty")
    return stripped


class GreetingCreate(BaseModel):
    """Schema for saving a greeting."""

    message: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)

    @field_validator("message")
    @classmethod
    def check_message(cls, v: str) -> str:
        """Trim whitespace and reject blank messages."""
        return _strip_message(v)


class GreetingUpdate(BaseModel):
    """Schema for editing a greeting."""

    message: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)

    @field_validator("message")
    @classmethod
    def check_message(cls, v: str) -> str:
        """Trim whitespace and reject blank messages."""
        return _strip_message(v)


class GreetingResponse(BaseModel):
    """Schema for greeting responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    message: str
    created_at: datetime
    updated_at: datetime


class NameRequest(BaseModel):
    """Optional first and last name for a personalized greeting."""

    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)


class GreetingText(BaseModel):
    """A rendered greeting."""

    greeting: str
