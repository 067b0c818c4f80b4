"""Registration, login and logout endpoints."""

import logging

from fastapi import APIRouter, Response, status

from forum_core.core.errors import Unauthenticated
from forum_core.core.settings import settings
from forum_core.repositories.user_repo import UserRepository
from forum_core.schemas.common import StatusResponse
from forum_core.schemas.user import LoginRequest, RegisterRequest, UserResponse
from forum_core.services import accounts

from ..dependencies import (
    CurrentSessionDep,
    SessionDep,
    SessionManagerDep,
    SessionTokenDep,
)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: SessionDep) -> UserResponse:
    """Create a new account."""
    user = accounts.register(
        db,
        email=payload.email,
        username=payload.username,
        password=payload.password,
    )
    return UserResponse.model_validate(user)


@router.post("/login", response_model=StatusResponse)
def login(
    payload: LoginRequest,
    response: Response,
    db: SessionDep,
    manager: SessionManagerDep,
) -> StatusResponse:
    """Check credentials and issue a session cookie.

    Logging in revokes any session the user already had.
    """
    user = accounts.authenticate(db, email=payload.email, password=payload.password)
    token = manager.create(db, user.id, user.role)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=int(manager.ttl.total_seconds()),
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return StatusResponse(message="Logged in.")


@router.post("/logout", response_model=StatusResponse)
def logout(
    response: Response,
    token: SessionTokenDep,
    db: SessionDep,
    manager: SessionManagerDep,
) -> StatusResponse:
    """Revoke the current session; the cookie is cleared even if that fails."""
    manager.end(db, token)
    response.delete_cookie(key=settings.session_cookie_name, path="/")
    return StatusResponse(message="Logged out.")


@router.get("/me", response_model=UserResponse)
def me(current: CurrentSessionDep, db: SessionDep) -> UserResponse:
    """Return the logged-in user's account."""
    user = UserRepository(db).get_by_id(current.user_id)
    if user is None:
        logger.warning("Session refers to missing user %s", current.user_id)
        raise Unauthenticated()
    return UserResponse.model_validate(user)
