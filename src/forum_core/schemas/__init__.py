"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import CommentCreate, CommentResponse
from .common import StatusResponse
from .post import PostCreate, PostResponse, PostUpdate
from .user import LoginRequest, ProfileUpdate, RegisterRequest, UserResponse
from .vote import VoteStatsResponse

__all__ = [
    "CommentCreate", "CommentResponse",
    "StatusResponse",
    "PostCreate", "PostResponse", "PostUpdate",
    "LoginRequest", "ProfileUpdate", "RegisterRequest", "UserResponse",
    "VoteStatsResponse",
]
