"""Observability setup: Pydantic Logfire for spans, stdlib logging for records.

Modules log through ``logging.getLogger(__name__)``; once ``configure_logfire``
has run, those records are forwarded to Logfire alongside the service spans.
"""

import logging

import logfire
from fastapi import FastAPI

from src.core.config import settings


logger = logging.getLogger(__name__)


def configure_logfire() -> None:
    """Configure Logfire and route stdlib log records into it.

    Records are exported only when LOGFIRE_TOKEN is set; without it Logfire
    still prints locally.
    """
    logfire.configure(
        token=settings.logfire_token,
        service_name="tasknest",
        service_version="0.1.0",
        environment=settings.environment,
        send_to_logfire="if-token-present",
    )
    logging.basicConfig(level=logging.INFO, handlers=[logfire.LogfireLoggingHandler()])

    logger.info("Logfire configured", extra={"environment": settings.environment})


def instrument_fastapi(app: FastAPI) -> None:
    """Trace every request handled by the app."""
    logfire.instrument_fastapi(app)


def span(name: str) -> logfire.LogfireSpan:
    """Open a Logfire span around a service operation, e.g. ``with span("task_service.update_task"):``."""
    return logfire.span(name)


def log_with_user_context(
    log: logging.Logger,
    level: str,
    message: str,
    user_id: str | None = None,
    **extra: object,
) -> None:
    """Log a record carrying the acting user and any other fields as ``extra``.

    Args:
        log: Logger of the calling module
        level: "debug", "info", "warning" or "error"
        message: Log message
        user_id: Acting user; omitted from the record when None
        **extra: Additional structured fields (task_id, limit, ...)
    """
    context = {"user_id": user_id, **extra} if user_id else extra
    getattr(log, level.lower())(message, extra=context)
