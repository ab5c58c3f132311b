"""Update models for database operations."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from src.core.clock import ensure_utc
from src.domain.create_models import validate_description, validate_tags, validate_title
from src.domain.task import TaskPriority, TaskStatus
from src.domain.user import validate_display_name, validate_email_format


class TaskUpdate(BaseModel):
    """Partial update payload for a task. Unset fields are left untouched."""

    title: str | None = None
    description: str | None = None
    due_date: datetime | None = Field(default=None, validation_alias=AliasChoices("due_date", "dueDate"))
    priority: TaskPriority | None = None
    status: TaskStatus | None = None
    tags: list[str] | None = None
    dependencies: list[str] | None = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str | None) -> str | None:
        """Validate title when provided."""
        return validate_title(v) if v is not None else v

    @field_validator("description")
    @classmethod
    def check_description(cls, v: str | None) -> str | None:
        """Validate description when provided."""
        return validate_description(v) if v is not None else v

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v: list[str] | None) -> list[str] | None:
        """Validate tags when provided."""
        return validate_tags(v) if v is not None else v

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: datetime | None) -> datetime | None:
        """Normalize the due date to UTC when provided."""
        return ensure_utc(v) if v is not None else v

    def to_patch(self) -> dict[str, Any]:
        """Fields the caller actually set, with explicit nulls dropped."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class UserUpdate(BaseModel):
    """Update payload for the current user's profile."""

    name: str | None = None
    email: str | None = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str | None) -> str | None:
        """Validate name when provided."""
        return validate_display_name(v) if v is not None else v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str | None) -> str | None:
        """Validate e-mail when provided."""
        return validate_email_format(v) if v is not None else v
