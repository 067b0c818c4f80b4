"""SQLAlchemy models for the forum application."""

from .comment import Comment
from .post import Category, Post, PostCategory
from .session import UserSession
from .user import ROLE_ADMIN, ROLE_USER, User
from .vote import CommentVote, PostVote

__all__ = [
    "Category", "Post", "PostCategory",
    "Comment",
    "CommentVote", "PostVote",
    "User", "ROLE_ADMIN", "ROLE_USER",
    "UserSession",
]
