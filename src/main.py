"""tasknest - personal task manager API with task dependencies."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.core.config import DEFAULT_SECRET_KEY, constants, settings
from src.core.db_client import ConstraintViolationError, DatabaseError, close_connection, init_db
from src.core.errors import TaskManagerError, classify_error_with_response
from src.core.logging import configure_logfire, instrument_fastapi
from src.interface.task_router import router as task_router
from src.interface.user_router import router as user_router
from src.modules.tasks.status import sweep_overdue


logger = logging.getLogger(__name__)


def validate_startup_configuration() -> None:
    """Validate required credentials, failing fast with a clear message.

    Outside production the development signing key is accepted.
    """
    logger.info("startup_validation_begin")

    try:
        secret_key = settings.require_credential("secret_key", "Token signing key")
        if settings.is_production and secret_key == DEFAULT_SECRET_KEY:
            raise ValueError("SECRET_KEY must be changed from the development default in production.")

        logger.info("startup_validation_complete", extra={"status": "ok"})
    except ValueError as e:
        logger.error("startup_validation_failed", extra={"error": str(e)})
        print(f"\n❌ Startup validation failed: {e}\n", file=sys.stderr)  # noqa: T201
        sys.exit(1)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Startup
    # Configure logging first so validation logs are captured
    configure_logfire()
    validate_startup_configuration()

    await init_db()
    logger.info("Database initialized")

    # Bring stored statuses up to date once; reads and writes keep them current afterwards
    await sweep_overdue()
    yield
    # Shutdown
    await close_connection()


app = FastAPI(
    title="tasknest",
    description="Personal task manager with task dependencies",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Register routers
app.include_router(user_router)
app.include_router(task_router)


def _error_body(exc: Exception) -> tuple[int, dict[str, str]]:
    error = classify_error_with_response(exc)
    envelope = "error" if error.status_code >= constants.HTTP_SERVER_ERROR else "fail"
    return error.status_code, {"status": envelope, "code": error.code, "message": error.message}


@app.exception_handler(TaskManagerError)
@app.exception_handler(ConstraintViolationError)
async def handle_domain_error(_request: Request, exc: Exception) -> JSONResponse:
    """Render domain errors in the API envelope."""
    status_code, body = _error_body(exc)
    return JSONResponse(content=body, status_code=status_code)


@app.exception_handler(DatabaseError)
async def handle_database_error(request: Request, exc: DatabaseError) -> JSONResponse:
    """Render store failures as a transient error; the mutation was not applied."""
    logger.error("request_failed_store_unavailable", extra={"path": request.url.path, "error": str(exc)})
    status_code, body = _error_body(exc)
    return JSONResponse(content=body, status_code=status_code)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures as 400 with the first problem as message."""
    errors = exc.errors()
    message = str(errors[0].get("msg", "Invalid request")).removeprefix("Value error, ") if errors else "Invalid request"
    return JSONResponse(
        content={"status": "fail", "code": "ERR_VALIDATION", "message": message},
        status_code=constants.HTTP_BAD_REQUEST,
    )


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (unknown route, wrong method) in the API envelope."""
    return JSONResponse(
        content={"status": "fail", "message": str(exc.detail)},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=200)
