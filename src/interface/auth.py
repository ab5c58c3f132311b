"""Bearer token issuing and verification for the API."""

import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from src.core.config import settings
from src.core.errors import AuthenticationError
from src.domain.user import User
from src.services import user_service


logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(settings.secret_key, salt="auth-token")


def issue_token(user_id: str) -> str:
    """Sign a bearer token for a user."""
    return _serializer().dumps({"user_id": user_id})


def read_token(token: str) -> str:
    """Return the user ID inside a bearer token.

    Raises:
        AuthenticationError: If the token is tampered with, malformed or expired
    """
    try:
        payload = _serializer().loads(token, max_age=settings.token_max_age_seconds)
    except SignatureExpired as err:
        raise AuthenticationError("Your token has expired. Please log in again.") from err
    except BadSignature as err:
        raise AuthenticationError("Invalid token. Please log in again.") from err

    user_id = payload.get("user_id") if isinstance(payload, dict) else None
    if not user_id:
        raise AuthenticationError("Invalid token. Please log in again.")
    return str(user_id)


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> User:
    """FastAPI dependency resolving the authenticated user from the Authorization header."""
    if credentials is None:
        logger.warning("auth_missing_token", extra={"path": request.url.path})
        raise AuthenticationError("You are not logged in. Please log in to get access.")

    try:
        user_id = read_token(credentials.credentials)
    except AuthenticationError:
        logger.warning("auth_invalid_token", extra={"path": request.url.path})
        raise

    return await user_service.get_user(user_id=user_id)
