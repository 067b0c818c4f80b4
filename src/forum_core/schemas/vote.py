"""Vote-related Pydantic schemas."""

from pydantic import BaseModel, Field

from forum_core.repositories.vote_repo import VoteStats


class VoteStatsResponse(BaseModel):
    """Counts returned after a like/dislike toggle."""

    success: bool = True
    likes: int
    dislikes: int
    user_vote: int = Field(0, description="1 liked, -1 disliked, 0 no vote")

    @classmethod
    def from_stats(cls, stats: VoteStats) -> "VoteStatsResponse":
        return cls(likes=stats.likes, dislikes=stats.dislikes, user_vote=stats.user_vote or 0)
