"""Models capturing like/dislike votes on posts and comments."""

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
)
from sqlalchemy.orm import Mapped, mapped_column

from forum_core.db.session import Base

VOTE_LIKE = 1
VOTE_DISLIKE = -1


class PostVote(Base):
    """Per-user vote on a post.

    The composite primary key allows at most one row per (user, post).
    """

    __tablename__ = "post_votes"
    target_field = "post_id"
    __table_args__ = (
        CheckConstraint("vote IN (1, -1)", name="ck_post_votes_vote"),
        Index("ix_post_votes_post_id", "post_id"),
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("posts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # 1 = like, -1 = dislike.
    vote: Mapped[int] = mapped_column(SmallInteger, nullable=False)


class CommentVote(Base):
    """Per-user vote on a comment."""

    __tablename__ = "comment_votes"
    target_field = "comment_id"
    __table_args__ = (
        CheckConstraint("vote IN (1, -1)", name="ck_comment_votes_vote"),
        Index("ix_comment_votes_comment_id", "comment_id"),
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    comment_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("comments.id", ondelete="CASCADE"),
        primary_key=True,
    )
    vote: Mapped[int] = mapped_column(SmallInteger, nullable=False)
