"""Data access helpers for persisted login sessions."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from forum_core.models.session import UserSession

__all__ = ["SessionRepository"]


class SessionRepository:
    """Thin wrapper around the ``sessions`` table."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, token: str) -> UserSession | None:
        """Return the session row for ``token``, bypassing stale identity-map state."""
        stmt = (
            select(UserSession)
            .where(UserSession.session_id == token)
            .execution_options(populate_existing=True)
        )
        return self.session.scalars(stmt).first()

    def create(self, *, token: str, user_id: int, role: str, expiry: datetime) -> UserSession:
        record = UserSession(session_id=token, user_id=user_id, role=role, expiry=expiry)
        self.session.add(record)
        self.session.flush()
        return record

    def delete(self, token: str) -> None:
        """Delete a single session; deleting an absent token is a no-op."""
        self.session.execute(delete(UserSession).where(UserSession.session_id == token))

    def delete_for_user(self, user_id: int) -> None:
        """Delete every session belonging to ``user_id``."""
        self.session.execute(delete(UserSession).where(UserSession.user_id == user_id))
