"""Domain exceptions and error classification for the task API."""

from enum import Enum

from pydantic import BaseModel

from src.core.config import constants
from src.core.db_client import DatabaseError


class TaskManagerError(Exception):
    """Base class for errors the API reports back to the caller."""


class InvalidDependencyError(TaskManagerError):
    """A proposed dependency does not exist or belongs to another user."""

    def __init__(self, message: str = "One or more dependencies do not exist or do not belong to you") -> None:
        super().__init__(message)


class CircularDependencyError(TaskManagerError):
    """Accepting the proposed dependencies would close a cycle."""

    def __init__(self, message: str = "Circular dependency detected") -> None:
        super().__init__(message)


class DependencyLimitExceededError(TaskManagerError):
    """The dependency graph is too large to check within the configured bound."""


class TaskNotFoundError(TaskManagerError):
    """No task with the given ID exists for the requesting user."""

    def __init__(self, message: str = "No task found with that ID") -> None:
        super().__init__(message)


class UserAlreadyExistsError(TaskManagerError):
    """A user with the given e-mail is already registered."""


class AuthenticationError(TaskManagerError):
    """Credentials or bearer token could not be verified."""


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Task errors
    ERR_INVALID_DEPENDENCY = "ERR_INVALID_DEPENDENCY"
    ERR_CIRCULAR_DEPENDENCY = "ERR_CIRCULAR_DEPENDENCY"
    ERR_DEPENDENCY_LIMIT_EXCEEDED = "ERR_DEPENDENCY_LIMIT_EXCEEDED"
    ERR_TASK_NOT_FOUND = "ERR_TASK_NOT_FOUND"
    ERR_VALIDATION = "ERR_VALIDATION"

    # User errors
    ERR_USER_ALREADY_EXISTS = "ERR_USER_ALREADY_EXISTS"
    ERR_AUTHENTICATION_FAILED = "ERR_AUTHENTICATION_FAILED"

    # Service errors
    ERR_STORE_UNAVAILABLE = "ERR_STORE_UNAVAILABLE"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity
    status_code: int


def classify_error_with_response(exception: Exception) -> ErrorResponse:  # noqa: PLR0911
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised while handling a request

    Returns:
        ErrorResponse with code, message, suggestion, severity and HTTP status
    """
    if isinstance(exception, InvalidDependencyError):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_DEPENDENCY,
            message=str(exception),
            suggestion="Pick dependencies from your own task list.",
            severity=ErrorSeverity.LOW,
            status_code=constants.HTTP_BAD_REQUEST,
        )

    if isinstance(exception, CircularDependencyError):
        return ErrorResponse(
            code=ErrorCode.ERR_CIRCULAR_DEPENDENCY,
            message=str(exception),
            suggestion="Remove the dependency that points back to this task.",
            severity=ErrorSeverity.LOW,
            status_code=constants.HTTP_BAD_REQUEST,
        )

    if isinstance(exception, DependencyLimitExceededError):
        return ErrorResponse(
            code=ErrorCode.ERR_DEPENDENCY_LIMIT_EXCEEDED,
            message=str(exception),
            suggestion="Split the work into smaller dependency chains.",
            severity=ErrorSeverity.MEDIUM,
            status_code=constants.HTTP_BAD_REQUEST,
        )

    if isinstance(exception, TaskNotFoundError):
        return ErrorResponse(
            code=ErrorCode.ERR_TASK_NOT_FOUND,
            message=str(exception),
            suggestion="Refresh your task list and try again.",
            severity=ErrorSeverity.LOW,
            status_code=constants.HTTP_NOT_FOUND,
        )

    if isinstance(exception, UserAlreadyExistsError):
        return ErrorResponse(
            code=ErrorCode.ERR_USER_ALREADY_EXISTS,
            message=str(exception),
            suggestion="Log in instead, or register with a different e-mail.",
            severity=ErrorSeverity.LOW,
            status_code=constants.HTTP_BAD_REQUEST,
        )

    if isinstance(exception, AuthenticationError):
        return ErrorResponse(
            code=ErrorCode.ERR_AUTHENTICATION_FAILED,
            message=str(exception),
            suggestion="Log in again to get a fresh token.",
            severity=ErrorSeverity.MEDIUM,
            status_code=constants.HTTP_UNAUTHORIZED,
        )

    if isinstance(exception, ValueError):
        return ErrorResponse(
            code=ErrorCode.ERR_VALIDATION,
            message=str(exception),
            suggestion="Check the submitted fields and try again.",
            severity=ErrorSeverity.LOW,
            status_code=constants.HTTP_BAD_REQUEST,
        )

    if isinstance(exception, DatabaseError):
        return ErrorResponse(
            code=ErrorCode.ERR_STORE_UNAVAILABLE,
            message="The task store is temporarily unavailable.",
            suggestion="Please try again in a moment. Your change was not saved.",
            severity=ErrorSeverity.HIGH,
            status_code=constants.HTTP_SERVICE_UNAVAILABLE,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, contact support.",
        severity=ErrorSeverity.MEDIUM,
        status_code=constants.HTTP_SERVER_ERROR,
    )
