"""Registration, login and profile helpers for user accounts."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from forum_core.core import security
from forum_core.core.errors import Conflict, NotFound, Transient, Unauthenticated, ValidationFailed
from forum_core.models import Post, User
from forum_core.repositories.post_repo import PostRepository
from forum_core.repositories.user_repo import UserRepository
from forum_core.repositories.vote_repo import VoteRepository

__all__ = [
    "ProfilePost",
    "UserProfile",
    "register",
    "authenticate",
    "update_profile",
    "get_profile",
]

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")
# bcrypt only looks at the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72


@dataclass
class ProfilePost:
    post: Post
    likes: int
    dislikes: int
    categories: list[str]


@dataclass
class UserProfile:
    user: User
    posts: list[ProfilePost]


def register(db: Session, *, email: str, username: str, password: str) -> User:
    """Create a new account with the ``user`` role.

    Raises:
        ValidationFailed: If a field is blank, the email is malformed or the
            password is too long.
        Conflict: If the email or username (case-insensitive) is taken.
    """
    email = email.strip()
    username = username.strip()
    if not email or not username or not password:
        raise ValidationFailed("All fields are required.")
    if not EMAIL_PATTERN.match(email):
        raise ValidationFailed("Invalid email format.")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationFailed("Password is too long.")

    repo = UserRepository(db)
    try:
        if repo.email_exists(email):
            raise Conflict("Email already taken.")
        if repo.username_exists(username):
            raise Conflict("Username already taken.")
        user = repo.create(
            email=email,
            username=username,
            password_hash=security.hash_password(password),
        )
        db.commit()
    except IntegrityError as err:
        # Lost a race with a concurrent registration.
        db.rollback()
        raise Conflict("Email or username already taken.") from err
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Error inserting user", exc_info=True)
        raise Transient() from err
    logger.info("Registered user %s", user.id)
    return user


def authenticate(db: Session, *, email: str, password: str) -> User:
    """Return the account matching the credentials.

    Raises:
        ValidationFailed: If either field is blank.
        Unauthenticated: If the email is unknown or the password is wrong.
    """
    email = email.strip()
    if not email or not password:
        raise ValidationFailed("Email and password are required.")
    try:
        user = UserRepository(db).get_by_email(email)
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Error fetching user", exc_info=True)
        raise Transient() from err
    if user is None or not security.verify_password(password, user.password):
        logger.info("Failed login attempt")
        raise Unauthenticated("Invalid email or password.")
    return user


def update_profile(
    db: Session,
    user_id: int,
    *,
    username: str | None = None,
    display_name: str | None = None,
) -> User:
    """Update username and display name; blank values keep the current ones.

    Raises:
        NotFound: If the user does not exist.
        Conflict: If the new username is taken by someone else.
    """
    repo = UserRepository(db)
    try:
        user = repo.get_by_id(user_id)
        if user is None:
            raise NotFound("User not found.")

        new_username = (username or "").strip() or user.username
        new_display_name = (display_name or "").strip() or user.display_name
        if new_username.lower() != user.username.lower() and repo.username_exists(new_username):
            raise Conflict("Username already taken.")

        repo.update_profile(user, username=new_username, display_name=new_display_name)
        db.commit()
    except IntegrityError as err:
        db.rollback()
        raise Conflict("Username already taken.") from err
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Error updating user profile", exc_info=True)
        raise Transient() from err
    return user


def get_profile(db: Session, user_id: int) -> UserProfile:
    """Return a user together with their posts, newest first.

    Raises:
        NotFound: If the user does not exist.
    """
    try:
        user = UserRepository(db).get_by_id(user_id)
        if user is None:
            raise NotFound("User not found.")
        posts = PostRepository(db)
        votes = VoteRepository.for_posts(db)
        authored = posts.list_by_author(user_id)
        categories = posts.categories_by_post([post.id for post in authored])
        entries = []
        for post in authored:
            stats = votes.counts(post.id, None)
            entries.append(
                ProfilePost(
                    post=post,
                    likes=stats.likes,
                    dislikes=stats.dislikes,
                    categories=categories[post.id],
                )
            )
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Error querying user profile", exc_info=True)
        raise Transient() from err
    return UserProfile(user=user, posts=entries)
