"""Domain models and DTOs."""

from src.domain.create_models import TaskCreate, UserCreate, UserLogin
from src.domain.task import (
    DependencyGraph,
    DependencyGraphEdge,
    DependencyGraphNode,
    DependencySummary,
    Task,
    TaskPriority,
    TaskStatus,
)
from src.domain.update_models import TaskUpdate, UserUpdate
from src.domain.user import User


__all__ = [
    "DependencyGraph",
    "DependencyGraphEdge",
    "DependencyGraphNode",
    "DependencySummary",
    "Task",
    "TaskCreate",
    "TaskPriority",
    "TaskStatus",
    "TaskUpdate",
    "User",
    "UserCreate",
    "UserLogin",
    "UserUpdate",
]
