"""Account endpoints: register, login and profile."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, status

from src.domain.create_models import UserCreate, UserLogin
from src.domain.update_models import UserUpdate
from src.domain.user import User
from src.interface.auth import get_current_user, issue_token
from src.services import user_service


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


def _with_token(user: User) -> dict[str, Any]:
    return {
        "status": "success",
        "token": issue_token(user.id),
        "data": {"user": user.model_dump(mode="json")},
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(payload: UserCreate) -> dict[str, Any]:
    """Create an account and log it in."""
    user = await user_service.register(payload=payload)
    logger.info("user_registered", extra={"user_id": user.id})
    return _with_token(user)


@router.post("/login")
async def login(payload: UserLogin) -> dict[str, Any]:
    """Exchange credentials for a bearer token."""
    user = await user_service.authenticate(email=payload.email, password=payload.password)
    logger.info("user_login_success", extra={"user_id": user.id})
    return _with_token(user)


@router.get("/me")
async def get_me(user: User = Depends(get_current_user)) -> dict[str, Any]:
    """Return the authenticated user."""
    return {"status": "success", "data": {"user": user.model_dump(mode="json")}}


@router.patch("/updateMe")
async def update_me(payload: UserUpdate, user: User = Depends(get_current_user)) -> dict[str, Any]:
    """Update the authenticated user's name and/or e-mail."""
    updated = await user_service.update_me(user_id=user.id, payload=payload)
    return {"status": "success", "data": {"user": updated.model_dump(mode="json")}}
