"""Data access helpers for comments."""
from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from forum_core.models import Comment

__all__ = ["CommentRepository"]


class CommentRepository:
    """Thin wrapper around database access for comments."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, comment_id: int) -> Comment | None:
        return self.session.scalars(select(Comment).where(Comment.id == comment_id)).first()

    def owner_id(self, comment_id: int) -> int | None:
        """Return the author id of a comment, or None when the comment is absent."""
        return self.session.scalar(select(Comment.user_id).where(Comment.id == comment_id))

    def create(self, *, post_id: int, user_id: int, content: str) -> Comment:
        comment = Comment(post_id=post_id, user_id=user_id, content=content)
        self.session.add(comment)
        self.session.flush()
        return comment

    def list_for_post(self, post_id: int) -> list[Comment]:
        """Return comments on a post, oldest first."""
        stmt = (
            select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at, Comment.id)
        )
        return list(self.session.scalars(stmt))

    def ids_for_post(self, post_id: int) -> list[int]:
        return list(self.session.scalars(select(Comment.id).where(Comment.post_id == post_id)))

    def delete(self, comment_id: int) -> None:
        """Delete a comment row; deleting an absent comment is a no-op."""
        self.session.execute(delete(Comment).where(Comment.id == comment_id))

    def delete_for_post(self, post_id: int) -> None:
        """Delete every comment attached to a post."""
        self.session.execute(delete(Comment).where(Comment.post_id == post_id))
