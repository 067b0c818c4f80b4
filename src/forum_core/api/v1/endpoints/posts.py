"""Post-related endpoints: listing, authoring, deletion, votes and comments."""

from fastapi import APIRouter, Query, status

from forum_core.repositories.user_repo import UserRepository
from forum_core.schemas.comment import CommentCreate, CommentResponse
from forum_core.schemas.common import StatusResponse
from forum_core.schemas.post import PostCreate, PostResponse, PostUpdate
from forum_core.schemas.vote import VoteStatsResponse
from forum_core.services import cascade, comments, posts
from forum_core.services.comments import CommentView
from forum_core.services.votes import post_votes

from ..dependencies import CurrentSessionDep, OptionalSessionDep, SessionDep

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=list[PostResponse])
def list_posts(
    db: SessionDep,
    current: OptionalSessionDep,
    filter_name: str | None = Query(
        None, alias="filter", description="new, best, my, liked or commented"
    ),
    category: str | None = Query(None, description="Restrict to one category"),
) -> list[PostResponse]:
    """List posts newest first, or by score for ``best``."""
    viewer_id = current.user_id if current else None
    views = posts.list_posts(db, viewer_id, filter_name=filter_name, category=category)
    return [PostResponse.from_view(view) for view in views]


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    payload: PostCreate,
    current: CurrentSessionDep,
    db: SessionDep,
) -> PostResponse:
    """Create a post authored by the caller."""
    post = posts.create_post(
        db,
        current.user_id,
        title=payload.title,
        content=payload.content,
        categories=payload.categories,
        image_url=payload.image_url,
    )
    return PostResponse.from_view(posts.get_post(db, post.id, current.user_id))


@router.get("/{post_id}", response_model=PostResponse)
def get_post(post_id: int, db: SessionDep, current: OptionalSessionDep) -> PostResponse:
    """Return a post with its comments."""
    viewer_id = current.user_id if current else None
    return PostResponse.from_view(posts.get_post(db, post_id, viewer_id))


@router.put("/{post_id}", response_model=PostResponse)
def edit_post(
    post_id: int,
    payload: PostUpdate,
    current: CurrentSessionDep,
    db: SessionDep,
) -> PostResponse:
    """Replace the caller's own post."""
    posts.edit_post(
        db,
        current.user_id,
        post_id,
        title=payload.title,
        content=payload.content,
        categories=payload.categories,
        image_url=payload.image_url,
    )
    return PostResponse.from_view(posts.get_post(db, post_id, current.user_id))


@router.delete("/{post_id}", response_model=StatusResponse)
def delete_post(post_id: int, current: CurrentSessionDep, db: SessionDep) -> StatusResponse:
    """Delete a post with everything attached to it. Author or admin only."""
    cascade.remove_post(db, current, post_id)
    return StatusResponse(message="Post deleted successfully.")


@router.post("/{post_id}/like", response_model=VoteStatsResponse)
def like_post(post_id: int, current: CurrentSessionDep, db: SessionDep) -> VoteStatsResponse:
    return VoteStatsResponse.from_stats(post_votes(db).like(current.user_id, post_id))


@router.post("/{post_id}/dislike", response_model=VoteStatsResponse)
def dislike_post(post_id: int, current: CurrentSessionDep, db: SessionDep) -> VoteStatsResponse:
    return VoteStatsResponse.from_stats(post_votes(db).dislike(current.user_id, post_id))


@router.get("/{post_id}/votes", response_model=VoteStatsResponse)
def post_vote_stats(
    post_id: int,
    db: SessionDep,
    current: OptionalSessionDep,
) -> VoteStatsResponse:
    """Return like/dislike counts and the caller's own vote."""
    caller_id = current.user_id if current else None
    return VoteStatsResponse.from_stats(post_votes(db).stats(post_id, caller_id))


@router.post(
    "/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    post_id: int,
    payload: CommentCreate,
    current: CurrentSessionDep,
    db: SessionDep,
) -> CommentResponse:
    """Comment on a post."""
    comment = comments.create_comment(db, current.user_id, post_id, payload.content)
    author = UserRepository(db).get_by_id(current.user_id)
    view = CommentView(
        comment=comment,
        username=author.username if author else "",
        likes=0,
        dislikes=0,
        user_vote=None,
    )
    return CommentResponse.from_view(view)
