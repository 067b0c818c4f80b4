# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")

from forum_core.api.v1.dependencies import get_session_manager_dep
from forum_core.core.security import hash_password
from forum_core.core.settings import settings
from forum_core.db.session import Base, ensure_schema
from forum_core.db.session import get_db as app_get_session
from forum_core.main import app as fastapi_app
from forum_core.models import ROLE_ADMIN, ROLE_USER, Comment, Post, User
from forum_core.repositories.post_repo import PostRepository
from forum_core.services.sessions import SessionManager, SessionMirror

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "correct horse battery"
# Hashed once; bcrypt is deliberately slow.
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)

_USER_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite needs an explicit BEGIN for SAVEPOINT-based test isolation.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_autobegin(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")

    ensure_schema(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        # Categories are seeded once per run and stay.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                if table.name != "categories":
                    cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def session_manager(app: FastAPI) -> Iterator[SessionManager]:
    """Provide a manager with an empty mirror and wire it into the app."""
    manager = SessionManager(SessionMirror())
    app.dependency_overrides[get_session_manager_dep] = lambda: manager
    try:
        yield manager
    finally:
        app.dependency_overrides.pop(get_session_manager_dep, None)


@pytest.fixture()
def client(app: FastAPI, session_manager: SessionManager) -> Iterator[TestClient]:
    # Not used as a context manager so the startup hook leaves the real database alone.
    yield TestClient(app, base_url="http://test")


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory persisting users that share ``TEST_PASSWORD``."""

    def _make_user(username: str | None = None, *, role: str = ROLE_USER) -> User:
        username = username or f"user{next(_USER_COUNTER)}"
        user = User(
            email=f"{username.lower()}@example.com",
            username=username,
            password=TEST_PASSWORD_HASH,
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Create and return the primary test user."""
    return make_user("alice")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    """Create and return a second user."""
    return make_user("bob")


@pytest.fixture()
def admin_user(make_user: Callable[..., User]) -> User:
    """Create and return an administrator."""
    return make_user("root", role=ROLE_ADMIN)


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    """Return a factory persisting posts directly through the repository."""

    def _make_post(
        author: User,
        *,
        title: str = "Test post",
        content: str = "Test post content",
        categories: tuple[str, ...] = ("news",),
    ) -> Post:
        repo = PostRepository(db_session)
        post = repo.create(user_id=author.id, title=title, content=content, image_url=None)
        ids = repo.category_ids(categories)
        repo.add_categories(post.id, [ids[name] for name in categories])
        db_session.commit()
        return post

    return _make_post


@pytest.fixture()
def test_post(make_post: Callable[..., Post], test_user: User) -> Post:
    """Create a baseline post authored by ``test_user``."""
    return make_post(test_user)


@pytest.fixture()
def test_comment(db_session: Session, test_post: Post, other_user: User) -> Comment:
    """Create a comment by ``other_user`` on ``test_post``."""
    comment = Comment(post_id=test_post.id, user_id=other_user.id, content="Nice post")
    db_session.add(comment)
    db_session.commit()
    return comment


@pytest.fixture()
def login_as(
    client: TestClient,
    db_session: Session,
    session_manager: SessionManager,
) -> Callable[[User], str]:
    """Return a helper that opens a session for a user and sets the cookie."""

    def _login_as(user: User) -> str:
        token = session_manager.create(db_session, user.id, user.role)
        client.cookies.set(settings.session_cookie_name, token)
        return token

    return _login_as


@pytest.fixture()
def test_password() -> str:
    """Plain password shared by every user from ``make_user``."""
    return TEST_PASSWORD
