"""Session issuing, validation, expiry and revocation.

The ``sessions`` table is the source of truth. :class:`SessionMirror` keeps a
process-wide, best-effort copy keyed by token that is refreshed on every
successful resolution, so a cold mirror after a restart heals itself.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from forum_core.core.errors import Transient
from forum_core.core.security import new_session_token
from forum_core.core.settings import settings
from forum_core.db.time import as_utc, utcnow
from forum_core.repositories.session_repo import SessionRepository

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class SessionData:
    """Identity a live session token resolves to."""

    user_id: int
    role: str
    expiry: datetime


class ReadWriteLock:
    """Lock allowing many concurrent readers or a single writer.

    Waiting writers block new readers so a steady stream of resolutions
    cannot starve session creation or logout.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class SessionMirror:
    """In-memory token lookup guarded by a reader/writer lock.

    Entries never expire on their own; they are dropped when a resolution
    finds the persisted row expired or missing, or on logout.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._entries: dict[str, SessionData] = {}

    def get(self, token: str) -> SessionData | None:
        with self._lock.read():
            return self._entries.get(token)

    def put(self, token: str, data: SessionData) -> None:
        with self._lock.write():
            self._entries[token] = data

    def discard(self, token: str) -> None:
        with self._lock.write():
            self._entries.pop(token, None)

    def discard_user(self, user_id: int) -> None:
        """Drop every cached token that belongs to ``user_id``."""
        with self._lock.write():
            stale = [token for token, data in self._entries.items() if data.user_id == user_id]
            for token in stale:
                del self._entries[token]

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)

    def __contains__(self, token: object) -> bool:
        with self._lock.read():
            return token in self._entries


class SessionManager:
    """Issue, resolve and revoke login sessions.

    Only one session per user is live at a time: creating a session deletes
    every earlier one for the same user.
    """

    def __init__(
        self,
        mirror: SessionMirror | None = None,
        *,
        ttl: timedelta | None = None,
        clock: Clock = utcnow,
        token_factory: Callable[[], str] = new_session_token,
    ) -> None:
        self.mirror = mirror if mirror is not None else SessionMirror()
        self.ttl = ttl if ttl is not None else timedelta(seconds=settings.session_ttl_seconds)
        self._clock = clock
        self._token_factory = token_factory

    def create(self, db: Session, user_id: int, role: str) -> str:
        """Persist a fresh session for ``user_id`` and return its token.

        Raises:
            Transient: If the store rejects any of the writes.
        """
        repo = SessionRepository(db)
        token = self._token_factory()
        expiry = self._clock() + self.ttl
        try:
            repo.delete_for_user(user_id)
            repo.create(token=token, user_id=user_id, role=role, expiry=expiry)
            db.commit()
        except SQLAlchemyError as err:
            _safe_rollback(db)
            logger.error("Error saving session for user %s", user_id, exc_info=True)
            raise Transient() from err

        self.mirror.discard_user(user_id)
        self.mirror.put(token, SessionData(user_id=user_id, role=role, expiry=expiry))
        logger.info("Created session for user %s", user_id)
        return token

    def resolve(self, db: Session, token: str | None) -> SessionData | None:
        """Return the identity behind ``token`` or None when not logged in.

        Expired rows are deleted as a side effect. Store failures are logged
        and reported as None so authentication never breaks the request.
        """
        if not token:
            return None
        try:
            record = SessionRepository(db).get(token)
        except SQLAlchemyError:
            _safe_rollback(db)
            logger.warning("Error querying session", exc_info=True)
            return None

        if record is None:
            self.mirror.discard(token)
            return None

        data = SessionData(
            user_id=record.user_id,
            role=record.role,
            expiry=as_utc(record.expiry),
        )
        if data.expiry <= self._clock():
            self._delete_expired(db, token)
            return None

        self.mirror.put(token, data)
        return data

    def end(self, db: Session, token: str | None) -> None:
        """Revoke ``token``.

        A failed delete is logged but not raised so the caller can still
        clear the client's cookie.
        """
        if not token:
            return
        try:
            SessionRepository(db).delete(token)
            db.commit()
        except SQLAlchemyError:
            _safe_rollback(db)
            logger.error("Error deleting session from database", exc_info=True)
        finally:
            self.mirror.discard(token)

    def delete_if_expired(self, db: Session, token: str) -> bool:
        """Delete the session when it has expired; return True if it was removed."""
        try:
            record = SessionRepository(db).get(token)
        except SQLAlchemyError:
            _safe_rollback(db)
            logger.warning("Error querying session", exc_info=True)
            return False
        if record is None or as_utc(record.expiry) > self._clock():
            return False
        return self._delete_expired(db, token)

    def _delete_expired(self, db: Session, token: str) -> bool:
        self.mirror.discard(token)
        try:
            SessionRepository(db).delete(token)
            db.commit()
        except SQLAlchemyError:
            _safe_rollback(db)
            logger.warning("Error deleting expired session", exc_info=True)
            return False
        logger.info("Removed expired session")
        return True


def _safe_rollback(db: Session) -> None:
    try:
        db.rollback()
    except SQLAlchemyError:
        logger.warning("Rollback failed", exc_info=True)


_DEFAULT_MANAGER = SessionManager()


def get_session_manager() -> SessionManager:
    """Return the process-wide session manager."""
    return _DEFAULT_MANAGER
