"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from forum_core.services.posts import PostView

from .comment import CommentResponse


class PostCreate(BaseModel):
    """Schema for creating a new post."""

    title: str = Field(..., description="Post title")
    content: str = Field(..., description="Post body")
    image_url: str | None = Field(None, description="Reference to an already uploaded image")
    categories: list[str] = Field(default_factory=list, description="One to three category names")


class PostUpdate(PostCreate):
    """Schema for replacing an existing post's editable fields."""


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: int
    user_id: int
    username: str
    title: str
    content: str
    image_url: str | None
    created_at: datetime
    categories: list[str]
    likes: int
    dislikes: int
    user_vote: int = 0
    comments: list[CommentResponse] = Field(default_factory=list)

    @classmethod
    def from_view(cls, view: PostView) -> "PostResponse":
        post = view.post
        return cls(
            id=post.id,
            user_id=post.user_id,
            username=view.username,
            title=post.title,
            content=post.content,
            image_url=post.image_url,
            created_at=post.created_at,
            categories=view.categories,
            likes=view.likes,
            dislikes=view.dislikes,
            user_vote=view.user_vote or 0,
            comments=[CommentResponse.from_view(c) for c in view.comments],
        )
