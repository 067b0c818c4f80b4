"""Comment-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from forum_core.services.comments import CommentView


class CommentCreate(BaseModel):
    """Schema for adding a comment to a post."""

    content: str = Field(..., description="Comment body, 3 to 500 characters after trimming")


class CommentResponse(BaseModel):
    """Comment with author and vote information."""

    id: int
    post_id: int
    user_id: int
    username: str
    content: str
    created_at: datetime
    likes: int = 0
    dislikes: int = 0
    user_vote: int = 0

    @classmethod
    def from_view(cls, view: CommentView) -> "CommentResponse":
        comment = view.comment
        return cls(
            id=comment.id,
            post_id=comment.post_id,
            user_id=comment.user_id,
            username=view.username,
            content=comment.content,
            created_at=comment.created_at,
            likes=view.likes,
            dislikes=view.dislikes,
            user_vote=view.user_vote or 0,
        )
