"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from forum_core.core.errors import Unauthenticated
from forum_core.core.settings import settings
from forum_core.db.session import get_db
from forum_core.services.sessions import SessionData, SessionManager, get_session_manager

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_session_manager_dep() -> SessionManager:
    """Return the shared session manager."""
    return get_session_manager()


SessionManagerDep = Annotated[SessionManager, Depends(get_session_manager_dep)]


def get_session_token(request: Request) -> str | None:
    """Return the raw session token carried by the request cookie."""
    return request.cookies.get(settings.session_cookie_name)


SessionTokenDep = Annotated[str | None, Depends(get_session_token)]


def get_optional_session(
    token: SessionTokenDep,
    db: SessionDep,
    manager: SessionManagerDep,
) -> SessionData | None:
    """Resolve the session cookie; anonymous visitors yield None."""
    return manager.resolve(db, token)


OptionalSessionDep = Annotated[SessionData | None, Depends(get_optional_session)]


def get_current_session(current: OptionalSessionDep) -> SessionData:
    """Require a live session.

    Raises:
        Unauthenticated: If the cookie is missing, unknown or expired.
    """
    if current is None:
        raise Unauthenticated()
    return current


# Type alias for current session dependency
CurrentSessionDep = Annotated[SessionData, Depends(get_current_session)]
