"""Repositories wrapping the persisted forum tables."""

from .comment_repo import CommentRepository
from .post_repo import PostRepository
from .session_repo import SessionRepository
from .user_repo import UserRepository
from .vote_repo import VoteStats, VoteRepository

__all__ = [
    "CommentRepository",
    "PostRepository",
    "SessionRepository",
    "UserRepository",
    "VoteStats",
    "VoteRepository",
]
