"""User domain models."""

import re

from pydantic import BaseModel, Field, field_validator

from src.core.config import constants


EMAIL_PATTERN = r"^[^@\s'\"]+@[^@\s'\"]+\.[^@\s'\"]+$"


def validate_email_format(v: str) -> str:
    """Validate and normalize an e-mail address."""
    v = v.strip().lower()
    if not re.match(EMAIL_PATTERN, v):
        raise ValueError("Please provide a valid email")
    return v


def validate_display_name(v: str) -> str:
    """Validate name is usable - non-empty and not too long."""
    v = v.strip()

    if not v:
        raise ValueError("Name cannot be empty")

    if len(v) > constants.USER_NAME_MAX_LENGTH:
        raise ValueError(f"Name too long (max {constants.USER_NAME_MAX_LENGTH} characters)")

    return v


class User(BaseModel):
    """User data transfer object. Never carries the password hash."""

    id: str = Field(..., description="Unique user ID from database")
    name: str = Field(..., description="Display name of the user")
    email: str = Field(..., description="Login e-mail address")
    created: str = Field(..., description="Registration timestamp (ISO format)")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Validate e-mail format."""
        return validate_email_format(v)
