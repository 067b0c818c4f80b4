"""Business logic services for the forum application."""

from .sessions import SessionData, SessionManager, SessionMirror, get_session_manager
from .votes import VoteAction, VoteEngine, comment_votes, post_votes

__all__ = [
    "SessionData",
    "SessionManager",
    "SessionMirror",
    "get_session_manager",
    "VoteAction",
    "VoteEngine",
    "comment_votes",
    "post_votes",
]
