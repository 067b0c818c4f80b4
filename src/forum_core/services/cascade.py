"""Multi-table deletes for posts and comments.

Dependent rows are removed explicitly, children first, rather than relying
on the storage engine's ``ON DELETE CASCADE``. Each delete runs in a single
transaction; every step is a no-op when its rows are already gone, so a
failed delete may simply be retried.
"""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from forum_core.core.errors import Forbidden, NotFound, Transient
from forum_core.models.user import ROLE_ADMIN
from forum_core.repositories.comment_repo import CommentRepository
from forum_core.repositories.post_repo import PostRepository
from forum_core.repositories.vote_repo import VoteRepository

logger = logging.getLogger(__name__)


class Actor(Protocol):
    """Anything carrying the caller's identity, e.g. a resolved session."""

    user_id: int
    role: str


def authorize(actor: Actor, owner_id: int) -> None:
    """Allow the resource's author or an admin; raise Forbidden otherwise."""
    if actor.user_id != owner_id and actor.role != ROLE_ADMIN:
        raise Forbidden()


def post_owner(db: Session, post_id: int) -> int:
    """Return the author id of a post.

    Raises:
        NotFound: If the post does not exist.
    """
    try:
        owner_id = PostRepository(db).owner_id(post_id)
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Error fetching post owner", exc_info=True)
        raise Transient() from err
    if owner_id is None:
        raise NotFound("Post not found.")
    return owner_id


def comment_owner(db: Session, comment_id: int) -> int:
    """Return the author id of a comment.

    Raises:
        NotFound: If the comment does not exist.
    """
    try:
        owner_id = CommentRepository(db).owner_id(comment_id)
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Error fetching comment owner", exc_info=True)
        raise Transient() from err
    if owner_id is None:
        raise NotFound("Comment not found.")
    return owner_id


def delete_post(db: Session, post_id: int) -> None:
    """Delete a post with its category links, comments and votes.

    Order: category links, comment votes, comments, post votes, post.
    """
    posts = PostRepository(db)
    comments = CommentRepository(db)
    try:
        posts.delete_categories(post_id)
        comment_ids = comments.ids_for_post(post_id)
        VoteRepository.for_comments(db).delete_for_targets(comment_ids)
        comments.delete_for_post(post_id)
        VoteRepository.for_posts(db).delete_for_targets([post_id])
        posts.delete(post_id)
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Error deleting post %s", post_id, exc_info=True)
        raise Transient() from err


def delete_comment(db: Session, comment_id: int) -> None:
    """Delete a comment after its votes."""
    try:
        VoteRepository.for_comments(db).delete_for_targets([comment_id])
        CommentRepository(db).delete(comment_id)
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Error deleting comment %s", comment_id, exc_info=True)
        raise Transient() from err


def remove_post(db: Session, actor: Actor, post_id: int) -> None:
    """Authorize ``actor`` and delete the post.

    Raises:
        NotFound: If the post does not exist.
        Forbidden: If the actor is neither the author nor an admin.
    """
    authorize(actor, post_owner(db, post_id))
    delete_post(db, post_id)
    logger.info("User %s deleted post %s", actor.user_id, post_id)


def remove_comment(db: Session, actor: Actor, comment_id: int) -> None:
    """Authorize ``actor`` and delete the comment.

    Raises:
        NotFound: If the comment does not exist.
        Forbidden: If the actor is neither the author nor an admin.
    """
    authorize(actor, comment_owner(db, comment_id))
    delete_comment(db, comment_id)
    logger.info("User %s deleted comment %s", actor.user_id, comment_id)
