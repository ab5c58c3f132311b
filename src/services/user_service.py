"""User service for registration, login and profile management."""

import hashlib
import logging
import secrets
from typing import Any

from src.core import db_client
from src.core.config import constants
from src.core.db_client import sanitize_param
from src.core.errors import AuthenticationError, UserAlreadyExistsError
from src.core.logging import span
from src.domain.create_models import UserCreate
from src.domain.update_models import UserUpdate
from src.domain.user import User


logger = logging.getLogger(__name__)

HASH_ALGORITHM = "pbkdf2_sha256"


def hash_password(password: str, *, salt: str | None = None, iterations: int | None = None) -> str:
    """Hash a password as "pbkdf2_sha256$iterations$salt$hexdigest"."""
    salt = salt or secrets.token_hex(16)
    iterations = iterations or constants.PASSWORD_HASH_ITERATIONS
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), iterations).hex()
    return f"{HASH_ALGORITHM}${iterations}${salt}${digest}"


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored hash in constant time."""
    try:
        algorithm, iterations, salt, _ = password_hash.split("$", 3)
    except ValueError:
        return False

    if algorithm != HASH_ALGORITHM:
        return False

    candidate = hash_password(password, salt=salt, iterations=int(iterations))
    return secrets.compare_digest(candidate, password_hash)


def _to_user(record: dict[str, Any]) -> User:
    return User.model_validate(record)


async def _find_by_email(email: str) -> dict[str, Any] | None:
    return await db_client.get_first_record(
        collection="users",
        filter_query=f'email = "{sanitize_param(email)}"',
    )


async def register(*, payload: UserCreate) -> User:
    """Register a new user.

    Args:
        payload: Validated registration fields

    Returns:
        The created user

    Raises:
        UserAlreadyExistsError: If the e-mail is already registered
        db_client.DatabaseError: If database operation fails
    """
    with span("user_service.register"):
        if await _find_by_email(payload.email):
            logger.warning("Registration rejected: e-mail already registered")
            raise UserAlreadyExistsError("User with that email already exists")

        try:
            record = await db_client.create_record(
                collection="users",
                data={
                    "name": payload.name,
                    "email": payload.email,
                    "password_hash": hash_password(payload.password),
                },
            )
        except db_client.ConstraintViolationError as e:
            # Lost a race with a concurrent registration
            raise UserAlreadyExistsError("User with that email already exists") from e

        logger.info("Registered user %s", record["id"])
        return _to_user(record)


async def authenticate(*, email: str, password: str) -> User:
    """Verify login credentials.

    Raises:
        AuthenticationError: If the e-mail is unknown or the password is wrong
    """
    with span("user_service.authenticate"):
        record = await _find_by_email(email)
        if record is None or not verify_password(password, record["password_hash"]):
            logger.warning("Failed login attempt")
            raise AuthenticationError("Incorrect email or password")

        return _to_user(record)


async def get_user(*, user_id: str) -> User:
    """Get a user by ID.

    Raises:
        AuthenticationError: If the user no longer exists
    """
    try:
        record = await db_client.get_record(collection="users", record_id=user_id)
    except db_client.RecordNotFoundError as e:
        raise AuthenticationError("The user belonging to this token no longer exists") from e
    return _to_user(record)


async def update_me(*, user_id: str, payload: UserUpdate) -> User:
    """Update the current user's name and/or e-mail.

    Raises:
        UserAlreadyExistsError: If the new e-mail belongs to another user
    """
    with span("user_service.update_me"):
        data = payload.model_dump(exclude_none=True)
        if not data:
            return await get_user(user_id=user_id)

        if "email" in data:
            other = await _find_by_email(data["email"])
            if other is not None and other["id"] != user_id:
                raise UserAlreadyExistsError("User with that email already exists")

        try:
            record = await db_client.update_record(collection="users", record_id=user_id, data=data)
        except db_client.ConstraintViolationError as e:
            raise UserAlreadyExistsError("User with that email already exists") from e

        logger.info("Updated profile for user %s", user_id)
        return _to_user(record)
