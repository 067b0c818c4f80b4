"""Service-level helpers for creating, editing and listing posts."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Final

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from forum_core.core.errors import (
    Forbidden,
    NotFound,
    Transient,
    Unauthenticated,
    ValidationFailed,
)
from forum_core.core.settings import settings
from forum_core.models import Post
from forum_core.models.post import CATEGORY_NAMES
from forum_core.repositories.post_repo import PostRepository
from forum_core.repositories.user_repo import UserRepository
from forum_core.repositories.vote_repo import VoteRepository
from forum_core.services.comments import CommentView, comment_views

logger = logging.getLogger(__name__)

ALLOWED_CATEGORIES: Final[frozenset[str]] = frozenset(CATEGORY_NAMES)
POST_FILTERS: Final[frozenset[str]] = frozenset({"new", "best", "my", "liked", "commented"})
# Filters that only make sense for a logged-in viewer.
PERSONAL_FILTERS: Final[frozenset[str]] = frozenset({"my", "liked", "commented"})
DEFAULT_FILTER: Final[str] = "new"


@dataclass
class PostView:
    """Post enriched with author, categories and vote counts."""

    post: Post
    username: str
    likes: int
    dislikes: int
    user_vote: int | None
    categories: list[str]
    comments: list[CommentView] = field(default_factory=list)


def normalize_categories(raw: Iterable[str]) -> list[str]:
    """Lower-case the submitted names and keep known ones, without duplicates.

    Raises:
        ValidationFailed: If no known category remains or too many were chosen.
    """
    chosen: list[str] = []
    for name in raw:
        lowered = name.strip().lower()
        if lowered in ALLOWED_CATEGORIES and lowered not in chosen:
            chosen.append(lowered)
    if not chosen:
        raise ValidationFailed("Please choose valid category.")
    if len(chosen) > settings.post_max_categories:
        raise ValidationFailed(
            f"You can select up to {settings.post_max_categories} categories."
        )
    return chosen


def _validate_text(title: str, content: str) -> tuple[str, str]:
    title = title.strip()
    content = content.strip()
    if not title or not content:
        raise ValidationFailed("Title and content cannot be empty.")
    return title, content


def _link_categories(repo: PostRepository, post_id: int, names: list[str]) -> None:
    ids = repo.category_ids(names)
    missing = [name for name in names if name not in ids]
    if missing:
        # The seed list should always cover every allowed name.
        logger.error("Categories missing from store: %s", ", ".join(missing))
        raise ValidationFailed("Please choose valid category.")
    repo.add_categories(post_id, [ids[name] for name in names])


def create_post(
    db: Session,
    user_id: int,
    *,
    title: str,
    content: str,
    categories: Iterable[str],
    image_url: str | None = None,
) -> Post:
    """Create a post linked to between one and the configured maximum of categories."""
    title, content = _validate_text(title, content)
    names = normalize_categories(categories)
    repo = PostRepository(db)
    try:
        post = repo.create(
            user_id=user_id,
            title=title,
            content=content,
            image_url=image_url or None,
        )
        _link_categories(repo, post.id, names)
        db.commit()
    except ValidationFailed:
        db.rollback()
        raise
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Error inserting post", exc_info=True)
        raise Transient() from err
    logger.info("User %s created post %s", user_id, post.id)
    return post


def edit_post(
    db: Session,
    user_id: int,
    post_id: int,
    *,
    title: str,
    content: str,
    categories: Iterable[str],
    image_url: str | None = None,
) -> Post:
    """Replace a post's text, image and categories.

    Only the author may edit; admins can delete but not rewrite.

    Raises:
        NotFound: If the post does not exist.
        Forbidden: If ``user_id`` is not the author.
    """
    repo = PostRepository(db)
    try:
        post = repo.get_by_id(post_id)
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Error fetching post", exc_info=True)
        raise Transient() from err
    if post is None:
        raise NotFound("Post not found.")
    if post.user_id != user_id:
        raise Forbidden()

    title, content = _validate_text(title, content)
    names = normalize_categories(categories)
    try:
        repo.update(post, title=title, content=content, image_url=image_url or None)
        repo.delete_categories(post_id)
        _link_categories(repo, post_id, names)
        db.commit()
    except ValidationFailed:
        db.rollback()
        raise
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Error updating post %s", post_id, exc_info=True)
        raise Transient() from err
    return post


def _post_views(
    db: Session,
    posts: list[Post],
    viewer_id: int | None,
    *,
    with_comments: bool,
) -> list[PostView]:
    # Authors and categories come from one query each; counts stay per post.
    usernames = UserRepository(db).usernames(post.user_id for post in posts)
    categories = PostRepository(db).categories_by_post([post.id for post in posts])
    votes = VoteRepository.for_posts(db)
    views = []
    for post in posts:
        stats = votes.counts(post.id, viewer_id)
        views.append(
            PostView(
                post=post,
                username=usernames.get(post.user_id, ""),
                likes=stats.likes,
                dislikes=stats.dislikes,
                user_vote=stats.user_vote,
                categories=categories[post.id],
                comments=comment_views(db, post.id, viewer_id) if with_comments else [],
            )
        )
    return views


def list_posts(
    db: Session,
    viewer_id: int | None,
    *,
    filter_name: str | None = None,
    category: str | None = None,
    with_comments: bool = True,
) -> list[PostView]:
    """Return posts for the home page.

    Raises:
        ValidationFailed: If the filter or category is not one of the known values.
        Unauthenticated: If a personal filter is requested without a viewer.
    """
    filter_name = filter_name or DEFAULT_FILTER
    if filter_name not in POST_FILTERS:
        raise ValidationFailed("Invalid filter value.")
    if category and category not in ALLOWED_CATEGORIES:
        raise ValidationFailed("Invalid category value.")
    if filter_name in PERSONAL_FILTERS and viewer_id is None:
        raise Unauthenticated()

    logger.debug("Filter applied: %s, category: %s", filter_name, category)
    try:
        posts = PostRepository(db).list_filtered(
            filter_name=filter_name,
            viewer_id=viewer_id,
            category=category or None,
        )
        return _post_views(db, posts, viewer_id, with_comments=with_comments)
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Error querying posts", exc_info=True)
        raise Transient() from err


def get_post(db: Session, post_id: int, viewer_id: int | None) -> PostView:
    """Return a single post with its comments.

    Raises:
        NotFound: If the post does not exist.
    """
    try:
        post = PostRepository(db).get_by_id(post_id)
        if post is None:
            raise NotFound("Post not found.")
        return _post_views(db, [post], viewer_id, with_comments=True)[0]
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Error fetching post %s", post_id, exc_info=True)
        raise Transient() from err
