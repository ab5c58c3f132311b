"""Configuration management for tasknest."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SECRET_KEY = "dev-secret-key-change-me"  # noqa: S105


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage Configuration
    sqlite_db_path: str = Field(default="data/tasks.db", description="SQLite database file for the task store")

    # Authentication Configuration
    secret_key: str = Field(default=DEFAULT_SECRET_KEY, description="Signing key for bearer tokens")
    token_max_age_seconds: int = Field(
        default=30 * 24 * 60 * 60, description="Lifetime of an issued bearer token (in seconds)"
    )

    # Deployment Configuration
    environment: str = Field(default="development", description="Deployment environment name")
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://client:3000"],
        description="Browser origins allowed to call the API",
    )

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    # Dependency Validation
    dependency_traversal_limit: int = Field(
        default=1000,
        description="Maximum number of distinct tasks expanded while checking for dependency cycles",
    )

    @property
    def is_production(self) -> bool:
        """Whether the app runs in a production environment."""
        return self.environment.lower() == "production"

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required credential is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The credential value

        Raises:
            ValueError: If the credential is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # HTTP Status Codes
    HTTP_OK: int = 200
    HTTP_CREATED: int = 201
    HTTP_NO_CONTENT: int = 204
    HTTP_BAD_REQUEST: int = 400
    HTTP_UNAUTHORIZED: int = 401
    HTTP_NOT_FOUND: int = 404
    HTTP_CONFLICT: int = 409
    HTTP_SERVER_ERROR: int = 500
    HTTP_SERVICE_UNAVAILABLE: int = 503

    # Task Field Limits
    TASK_TITLE_MAX_LENGTH: int = 100
    TASK_DESCRIPTION_MAX_LENGTH: int = 500

    # Account Limits
    USER_NAME_MAX_LENGTH: int = 50
    PASSWORD_MIN_LENGTH: int = 8
    PASSWORD_HASH_ITERATIONS: int = 260_000

    # Pagination Defaults
    DEFAULT_PER_PAGE_LIMIT: int = 500  # Default pagination limit for list queries

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent.parent


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
