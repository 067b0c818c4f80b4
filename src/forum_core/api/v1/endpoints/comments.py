"""Comment endpoints: deletion and votes."""

from fastapi import APIRouter

from forum_core.schemas.common import StatusResponse
from forum_core.schemas.vote import VoteStatsResponse
from forum_core.services import cascade
from forum_core.services.votes import comment_votes

from ..dependencies import CurrentSessionDep, OptionalSessionDep, SessionDep

router = APIRouter(prefix="/comments", tags=["comments"])


@router.delete("/{comment_id}", response_model=StatusResponse)
def delete_comment(
    comment_id: int,
    current: CurrentSessionDep,
    db: SessionDep,
) -> StatusResponse:
    """Delete a comment and its votes. Author or admin only."""
    cascade.remove_comment(db, current, comment_id)
    return StatusResponse(message="Comment deleted successfully.")


@router.post("/{comment_id}/like", response_model=VoteStatsResponse)
def like_comment(comment_id: int, current: CurrentSessionDep, db: SessionDep) -> VoteStatsResponse:
    return VoteStatsResponse.from_stats(comment_votes(db).like(current.user_id, comment_id))


@router.post("/{comment_id}/dislike", response_model=VoteStatsResponse)
def dislike_comment(
    comment_id: int,
    current: CurrentSessionDep,
    db: SessionDep,
) -> VoteStatsResponse:
    return VoteStatsResponse.from_stats(comment_votes(db).dislike(current.user_id, comment_id))


@router.get("/{comment_id}/votes", response_model=VoteStatsResponse)
def comment_vote_stats(
    comment_id: int,
    db: SessionDep,
    current: OptionalSessionDep,
) -> VoteStatsResponse:
    """Return like/dislike counts and the caller's own vote."""
    caller_id = current.user_id if current else None
    return VoteStatsResponse.from_stats(comment_votes(db).stats(comment_id, caller_id))
