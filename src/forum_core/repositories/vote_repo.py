"""Data access helpers for post and comment votes."""
from __future__ import annotations

from collections.abc import Iterable
from typing import NamedTuple

from sqlalchemy import case, delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from forum_core.models import Comment, CommentVote, Post, PostVote
from forum_core.models.vote import VOTE_DISLIKE, VOTE_LIKE

__all__ = ["VoteStats", "VoteRepository"]

_UPSERT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}


class VoteStats(NamedTuple):
    """Aggregated votes on a target together with the caller's own vote."""

    likes: int
    dislikes: int
    user_vote: int | None


class VoteRepository:
    """Vote table access shared by posts and comments.

    ``vote_model`` is either :class:`PostVote` or :class:`CommentVote`;
    ``target_model`` is the table the votes point at.
    """

    def __init__(
        self,
        session: Session,
        vote_model: type[PostVote] | type[CommentVote],
        target_model: type[Post] | type[Comment],
    ) -> None:
        self.session = session
        self.vote_model = vote_model
        self.target_model = target_model
        self.target_field: str = vote_model.target_field
        self._target_column = getattr(vote_model, self.target_field)

    @classmethod
    def for_posts(cls, session: Session) -> VoteRepository:
        return cls(session, PostVote, Post)

    @classmethod
    def for_comments(cls, session: Session) -> VoteRepository:
        return cls(session, CommentVote, Comment)

    def target_exists(self, target_id: int) -> bool:
        """Return True if the voted-on row exists."""
        stmt = select(self.target_model.id).where(self.target_model.id == target_id)
        return self.session.scalar(stmt) is not None

    def get(self, user_id: int, target_id: int) -> int | None:
        """Return the user's vote value on the target, or None when absent."""
        stmt = select(self.vote_model.vote).where(
            self.vote_model.user_id == user_id,
            self._target_column == target_id,
        )
        return self.session.scalar(stmt)

    def upsert(self, user_id: int, target_id: int, value: int) -> None:
        """Insert the vote or overwrite the existing row for (user, target)."""
        values = {"user_id": user_id, self.target_field: target_id, "vote": value}
        dialect = self.session.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            self.session.merge(self.vote_model(**values))
        else:
            stmt = insert(self.vote_model).values(**values).on_conflict_do_update(
                index_elements=["user_id", self.target_field],
                set_={"vote": value},
            )
            self.session.execute(stmt)
        self.session.flush()

    def remove(self, user_id: int, target_id: int) -> None:
        """Delete the user's vote on the target if present."""
        self.session.execute(
            delete(self.vote_model).where(
                self.vote_model.user_id == user_id,
                self._target_column == target_id,
            )
        )

    def counts(self, target_id: int, user_id: int | None) -> VoteStats:
        """Count likes and dislikes by scanning the live vote rows."""
        stmt = select(
            func.coalesce(func.sum(case((self.vote_model.vote == VOTE_LIKE, 1), else_=0)), 0),
            func.coalesce(func.sum(case((self.vote_model.vote == VOTE_DISLIKE, 1), else_=0)), 0),
        ).where(self._target_column == target_id)
        likes, dislikes = self.session.execute(stmt).one()
        user_vote = self.get(user_id, target_id) if user_id is not None else None
        return VoteStats(int(likes), int(dislikes), user_vote)

    def delete_for_targets(self, target_ids: Iterable[int]) -> None:
        """Delete every vote attached to any of ``target_ids``."""
        ids = list(target_ids)
        if not ids:
            return
        self.session.execute(delete(self.vote_model).where(self._target_column.in_(ids)))
