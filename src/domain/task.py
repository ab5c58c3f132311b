"""Task domain models and enums."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

from src.core.clock import ensure_utc


class TaskStatus(StrEnum):
    """Task lifecycle status. OVERDUE is derived from the due date, never chosen."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class TaskPriority(StrEnum):
    """Task priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DependencySummary(BaseModel):
    """Title and status of a prerequisite task, shown alongside its dependent."""

    id: str
    title: str
    status: TaskStatus


class Task(BaseModel):
    """Task data transfer object."""

    id: str = Field(..., description="Unique task ID from database")
    created: str = Field(..., description="Creation timestamp (ISO format)")
    updated: str = Field(..., description="Last update timestamp (ISO format)")
    title: str = Field(..., description="Task title")
    description: str = Field(default="", description="Detailed task description")
    due_date: datetime = Field(..., description="When the task is due")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Effective status")
    tags: list[str] = Field(default_factory=list, description="Unique labels")
    dependencies: list[str] = Field(default_factory=list, description="IDs of prerequisite tasks")
    dependency_details: list[DependencySummary] = Field(
        default_factory=list,
        description="Prerequisites that still exist, with their title and status",
    )
    owner_id: str = Field(..., description="Owning user ID")

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: datetime) -> datetime:
        """Normalize the due date to UTC."""
        return ensure_utc(v)


class DependencyGraphNode(BaseModel):
    """A task as a node of the dependency graph."""

    id: str
    title: str
    status: TaskStatus
    priority: TaskPriority


class DependencyGraphEdge(BaseModel):
    """An edge from a task to one of its prerequisites."""

    source: str = Field(..., description="Dependent task ID")
    target: str = Field(..., description="Prerequisite task ID")


class DependencyGraph(BaseModel):
    """A user's whole dependency graph, for visualization."""

    nodes: list[DependencyGraphNode] = Field(default_factory=list)
    edges: list[DependencyGraphEdge] = Field(default_factory=list)
