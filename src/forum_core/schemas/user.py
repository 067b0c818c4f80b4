"""User-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Schema for creating an account."""

    email: str = Field(..., description="Login email address")
    username: str = Field(..., description="Public handle, unique ignoring case")
    password: str = Field(..., description="Plain password; hashed before storage")


class LoginRequest(BaseModel):
    """Credentials exchanged for a session cookie."""

    email: str
    password: str


class ProfileUpdate(BaseModel):
    """Partial profile update; blank fields keep their current value."""

    username: str | None = None
    display_name: str | None = None


class UserResponse(BaseModel):
    """Public account information."""

    id: int
    username: str
    display_name: str | None = None
    role: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfilePostResponse(BaseModel):
    id: int
    title: str
    content: str
    image_url: str | None
    created_at: datetime
    likes: int
    dislikes: int
    categories: list[str]


class ProfileResponse(BaseModel):
    """Account information with the user's posts."""

    user: UserResponse
    posts: list[ProfilePostResponse]
