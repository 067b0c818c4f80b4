"""User profile endpoints."""

from fastapi import APIRouter

from forum_core.schemas.user import (
    ProfilePostResponse,
    ProfileResponse,
    ProfileUpdate,
    UserResponse,
)
from forum_core.services import accounts

from ..dependencies import CurrentSessionDep, SessionDep

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/me/profile", response_model=UserResponse)
def update_my_profile(
    payload: ProfileUpdate,
    current: CurrentSessionDep,
    db: SessionDep,
) -> UserResponse:
    """Change the caller's username or display name."""
    user = accounts.update_profile(
        db,
        current.user_id,
        username=payload.username,
        display_name=payload.display_name,
    )
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=ProfileResponse)
def get_user_profile(user_id: int, db: SessionDep) -> ProfileResponse:
    """Return a user's public profile and posts."""
    profile = accounts.get_profile(db, user_id)
    return ProfileResponse(
        user=UserResponse.model_validate(profile.user),
        posts=[
            ProfilePostResponse(
                id=entry.post.id,
                title=entry.post.title,
                content=entry.post.content,
                image_url=entry.post.image_url,
                created_at=entry.post.created_at,
                likes=entry.likes,
                dislikes=entry.dislikes,
                categories=entry.categories,
            )
            for entry in profile.posts
        ],
    )
