"""Service-level helpers for comments."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from forum_core.core.errors import NotFound, Transient, ValidationFailed
from forum_core.core.settings import settings
from forum_core.models import Comment
from forum_core.repositories.comment_repo import CommentRepository
from forum_core.repositories.post_repo import PostRepository
from forum_core.repositories.user_repo import UserRepository
from forum_core.repositories.vote_repo import VoteRepository

logger = logging.getLogger(__name__)


@dataclass
class CommentView:
    """Comment enriched with its author and vote counts."""

    comment: Comment
    username: str
    likes: int
    dislikes: int
    user_vote: int | None


def validate_comment_content(content: str) -> str:
    """Return the trimmed comment text or raise ValidationFailed."""
    trimmed = content.strip()
    if not trimmed:
        raise ValidationFailed("Comment content cannot be empty or contain only whitespace.")
    if len(trimmed) < settings.comment_min_length:
        raise ValidationFailed(
            f"Comment must be at least {settings.comment_min_length} characters long."
        )
    if len(trimmed) > settings.comment_max_length:
        raise ValidationFailed(
            f"Comment cannot be longer than {settings.comment_max_length} characters."
        )
    return trimmed


def create_comment(db: Session, user_id: int, post_id: int, content: str) -> Comment:
    """Attach a comment to an existing post.

    Raises:
        ValidationFailed: If the content is blank, too short or too long.
        NotFound: If the post does not exist.
    """
    text = validate_comment_content(content)
    try:
        if PostRepository(db).owner_id(post_id) is None:
            raise NotFound("Post not found.")
        comment = CommentRepository(db).create(post_id=post_id, user_id=user_id, content=text)
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Error inserting comment", exc_info=True)
        raise Transient() from err
    logger.info("User %s commented on post %s", user_id, post_id)
    return comment


def comment_views(db: Session, post_id: int, viewer_id: int | None) -> list[CommentView]:
    """Return the comments on a post, oldest first, with vote stats."""
    comments = CommentRepository(db).list_for_post(post_id)
    usernames = UserRepository(db).usernames(comment.user_id for comment in comments)
    votes = VoteRepository.for_comments(db)
    views = []
    for comment in comments:
        stats = votes.counts(comment.id, viewer_id)
        views.append(
            CommentView(
                comment=comment,
                username=usernames.get(comment.user_id, ""),
                likes=stats.likes,
                dislikes=stats.dislikes,
                user_vote=stats.user_vote,
            )
        )
    return views
