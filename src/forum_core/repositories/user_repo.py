"""Data access helpers for user accounts."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from forum_core.models.user import ROLE_USER, User

__all__ = ["UserRepository"]


class UserRepository:
    """Thin wrapper around database access for user accounts."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, user_id: int) -> User | None:
        """Return a user by identifier."""
        return self.session.get(User, user_id)

    def usernames(self, user_ids: Iterable[int]) -> dict[int, str]:
        """Map each existing user id in ``user_ids`` to its username."""
        ids = set(user_ids)
        if not ids:
            return {}
        rows = self.session.execute(select(User.id, User.username).where(User.id.in_(ids)))
        return {user_id: username for user_id, username in rows}

    def get_by_email(self, email: str) -> User | None:
        """Return the user registered with ``email``."""
        return self.session.scalars(select(User).where(User.email == email)).first()

    def email_exists(self, email: str) -> bool:
        """Return True if ``email`` is already registered."""
        stmt = select(func.count()).select_from(User).where(User.email == email)
        return bool(self.session.scalar(stmt))

    def username_exists(self, username: str) -> bool:
        """Return True if ``username`` is taken, ignoring case."""
        stmt = (
            select(func.count())
            .select_from(User)
            .where(func.lower(User.username) == username.lower())
        )
        return bool(self.session.scalar(stmt))

    def create(
        self,
        *,
        email: str,
        username: str,
        password_hash: str,
        role: str = ROLE_USER,
    ) -> User:
        """Insert a new account and return the persisted ORM instance."""
        user = User(email=email, username=username, password=password_hash, role=role)
        self.session.add(user)
        self.session.flush()
        return user

    def update_profile(self, user: User, *, username: str, display_name: str | None) -> User:
        """Overwrite the mutable profile fields of ``user``."""
        user.username = username
        user.display_name = display_name
        self.session.flush()
        return user
