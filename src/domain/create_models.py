"""Pydantic models for creating records in database."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from src.core.clock import ensure_utc
from src.core.config import constants
from src.domain.task import TaskPriority, TaskStatus
from src.domain.user import validate_display_name, validate_email_format


def validate_title(v: str) -> str:
    """Validate task title is present and within the length limit."""
    v = v.strip()
    if not v:
        raise ValueError("Task title is required")
    if len(v) > constants.TASK_TITLE_MAX_LENGTH:
        raise ValueError(f"Task title cannot exceed {constants.TASK_TITLE_MAX_LENGTH} characters")
    return v


def validate_description(v: str) -> str:
    """Validate task description is within the length limit."""
    v = v.strip()
    if len(v) > constants.TASK_DESCRIPTION_MAX_LENGTH:
        raise ValueError(f"Task description cannot exceed {constants.TASK_DESCRIPTION_MAX_LENGTH} characters")
    return v


def validate_tags(v: list[str]) -> list[str]:
    """Validate tags are non-empty and pairwise unique."""
    tags = [tag.strip() for tag in v]
    if any(not tag for tag in tags):
        raise ValueError("Tags cannot be empty")
    if len(set(tags)) != len(tags):
        raise ValueError("Tags must be unique")
    return tags


class UserCreate(BaseModel):
    """Registration payload."""

    name: str = Field(..., description="Display name of the user")
    email: str = Field(..., description="Login e-mail address")
    password: str = Field(..., description="User password")
    passwordConfirm: str = Field(..., description="Password confirmation")  # noqa: N815

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate display name."""
        return validate_display_name(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Validate e-mail format."""
        return validate_email_format(v)

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        """Validate password is long enough."""
        if len(v) < constants.PASSWORD_MIN_LENGTH:
            raise ValueError(f"Password must be at least {constants.PASSWORD_MIN_LENGTH} characters")
        return v

    @model_validator(mode="after")
    def validate_passwords_match(self) -> "UserCreate":
        """Validate password confirmation matches."""
        if self.password != self.passwordConfirm:
            raise ValueError("Passwords do not match")
        return self


class UserLogin(BaseModel):
    """Login payload."""

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Compare e-mails case-insensitively."""
        return validate_email_format(v)


class TaskCreate(BaseModel):
    """Payload for creating a task. The owner comes from the session, never the body."""

    title: str = Field(..., description="Task title")
    description: str = Field(default="", description="Detailed task description")
    due_date: datetime = Field(
        ...,
        validation_alias=AliasChoices("due_date", "dueDate"),
        description="When the task is due",
    )
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Requested status")
    tags: list[str] = Field(default_factory=list, description="Unique labels")
    dependencies: list[str] = Field(default_factory=list, description="IDs of prerequisite tasks")

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        """Validate title."""
        return validate_title(v)

    @field_validator("description")
    @classmethod
    def check_description(cls, v: str) -> str:
        """Validate description."""
        return validate_description(v)

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v: list[str]) -> list[str]:
        """Validate tags."""
        return validate_tags(v)

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: datetime) -> datetime:
        """Normalize the due date to UTC."""
        return ensure_utc(v)
