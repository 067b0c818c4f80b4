"""Like/dislike toggling for posts and comments.

Each (user, target) pair is in one of three states: no vote, liked or
disliked. Repeating an action clears the vote; the opposite action flips it
directly. Counts are always recomputed from the vote rows.
"""

from __future__ import annotations

import logging
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from forum_core.core.errors import NotFound, Transient
from forum_core.models.vote import VOTE_DISLIKE, VOTE_LIKE
from forum_core.repositories.vote_repo import VoteRepository, VoteStats

logger = logging.getLogger(__name__)


class VoteAction(str, Enum):
    """Button a user pressed."""

    LIKE = "like"
    DISLIKE = "dislike"


_ACTION_VALUES = {
    VoteAction.LIKE: VOTE_LIKE,
    VoteAction.DISLIKE: VOTE_DISLIKE,
}


def next_vote_state(current: int | None, action: VoteAction) -> int | None:
    """Return the vote value after ``action``; None means the vote is cleared."""
    desired = _ACTION_VALUES[action]
    if current == desired:
        return None
    return desired


class VoteEngine:
    """Apply toggle semantics against one vote table."""

    def __init__(self, db: Session, repo: VoteRepository, *, target_label: str) -> None:
        self.db = db
        self.repo = repo
        self.target_label = target_label

    def like(self, user_id: int, target_id: int) -> VoteStats:
        return self.apply(user_id, target_id, VoteAction.LIKE)

    def dislike(self, user_id: int, target_id: int) -> VoteStats:
        return self.apply(user_id, target_id, VoteAction.DISLIKE)

    def apply(self, user_id: int, target_id: int, action: VoteAction) -> VoteStats:
        """Toggle the user's vote and return fresh stats for the target.

        Raises:
            NotFound: If the target does not exist.
            Transient: If the store fails.
        """
        try:
            self._require_target(target_id)
            current = self.repo.get(user_id, target_id)
            new_value = next_vote_state(current, action)
            if new_value is None:
                self.repo.remove(user_id, target_id)
            else:
                self.repo.upsert(user_id, target_id, new_value)
            self.db.commit()
            return self.repo.counts(target_id, user_id)
        except SQLAlchemyError as err:
            self.db.rollback()
            logger.error(
                "Error updating vote on %s %s by user %s",
                self.target_label,
                target_id,
                user_id,
                exc_info=True,
            )
            raise Transient() from err

    def current_vote(self, user_id: int, target_id: int) -> int | None:
        """Return 1, -1, or None when the user has not voted."""
        try:
            return self.repo.get(user_id, target_id)
        except SQLAlchemyError as err:
            self.db.rollback()
            logger.error("Error checking vote", exc_info=True)
            raise Transient() from err

    def stats(self, target_id: int, caller_id: int | None = None) -> VoteStats:
        """Return (likes, dislikes, caller's vote) for an existing target.

        Raises:
            NotFound: If the target does not exist.
        """
        try:
            self._require_target(target_id)
            return self.repo.counts(target_id, caller_id)
        except SQLAlchemyError as err:
            self.db.rollback()
            logger.error("Error fetching votes", exc_info=True)
            raise Transient() from err

    def _require_target(self, target_id: int) -> None:
        if not self.repo.target_exists(target_id):
            raise NotFound(f"{self.target_label.capitalize()} not found.")


def post_votes(db: Session) -> VoteEngine:
    """Return a vote engine bound to post votes."""
    return VoteEngine(db, VoteRepository.for_posts(db), target_label="post")


def comment_votes(db: Session) -> VoteEngine:
    """Return a vote engine bound to comment votes."""
    return VoteEngine(db, VoteRepository.for_comments(db), target_label="comment")
