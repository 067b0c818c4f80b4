"""Data access helpers for working with posts."""
from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import delete, desc, exists, func, select
from sqlalchemy.orm import Session

from forum_core.models import Category, Comment, Post, PostCategory, PostVote
from forum_core.models.vote import VOTE_LIKE

__all__ = ["PostRepository"]


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, post_id: int) -> Post | None:
        """Return a post by identifier."""
        return self.session.scalars(select(Post).where(Post.id == post_id)).first()

    def owner_id(self, post_id: int) -> int | None:
        """Return the author id of a post, or None when the post is absent."""
        return self.session.scalar(select(Post.user_id).where(Post.id == post_id))

    def create(
        self,
        *,
        user_id: int,
        title: str,
        content: str,
        image_url: str | None,
    ) -> Post:
        """Insert a new post and return the persisted ORM instance."""
        post = Post(user_id=user_id, title=title, content=content, image_url=image_url)
        self.session.add(post)
        self.session.flush()
        return post

    def update(
        self,
        post: Post,
        *,
        title: str,
        content: str,
        image_url: str | None,
    ) -> Post:
        post.title = title
        post.content = content
        post.image_url = image_url
        self.session.flush()
        return post

    def category_ids(self, names: Sequence[str]) -> dict[str, int]:
        """Map category names to their ids; unknown names are omitted."""
        rows = self.session.execute(
            select(Category.name, Category.id).where(Category.name.in_(list(names)))
        )
        return {name: category_id for name, category_id in rows}

    def add_categories(self, post_id: int, category_ids: Sequence[int]) -> None:
        for category_id in category_ids:
            self.session.add(PostCategory(post_id=post_id, category_id=category_id))
        self.session.flush()

    def categories_by_post(self, post_ids: Sequence[int]) -> dict[int, list[str]]:
        """Return the category names of several posts in one query.

        Every requested id gets an entry, empty when the post has no links.
        """
        result: dict[int, list[str]] = {post_id: [] for post_id in post_ids}
        if not result:
            return result
        stmt = (
            select(PostCategory.post_id, Category.name)
            .join(Category, PostCategory.category_id == Category.id)
            .where(PostCategory.post_id.in_(list(result)))
            .order_by(PostCategory.post_id, Category.id)
        )
        for post_id, name in self.session.execute(stmt):
            result[post_id].append(name)
        return result

    def delete_categories(self, post_id: int) -> None:
        """Remove every category link of a post."""
        self.session.execute(delete(PostCategory).where(PostCategory.post_id == post_id))

    def delete(self, post_id: int) -> None:
        """Delete the post row; deleting an absent post is a no-op."""
        self.session.execute(delete(Post).where(Post.id == post_id))

    def list_filtered(
        self,
        *,
        filter_name: str,
        viewer_id: int | None,
        category: str | None = None,
    ) -> list[Post]:
        """Return posts for one of the closed set of listing filters.

        ``filter_name`` must already be validated. ``my``, ``liked`` and
        ``commented`` need a ``viewer_id``.
        """
        stmt = select(Post)
        if filter_name == "my":
            stmt = stmt.where(Post.user_id == viewer_id)
        elif filter_name == "liked":
            stmt = stmt.where(
                exists().where(
                    PostVote.post_id == Post.id,
                    PostVote.user_id == viewer_id,
                    PostVote.vote == VOTE_LIKE,
                )
            )
        elif filter_name == "commented":
            stmt = stmt.where(
                exists().where(Comment.post_id == Post.id, Comment.user_id == viewer_id)
            )

        if category:
            stmt = stmt.where(
                exists().where(
                    PostCategory.post_id == Post.id,
                    PostCategory.category_id == Category.id,
                    Category.name == category,
                )
            )

        if filter_name == "best":
            score = (
                select(func.coalesce(func.sum(PostVote.vote), 0))
                .where(PostVote.post_id == Post.id)
                .scalar_subquery()
            )
            stmt = stmt.order_by(desc(score), desc(Post.created_at), desc(Post.id))
        else:
            stmt = stmt.order_by(desc(Post.created_at), desc(Post.id))
        return list(self.session.scalars(stmt))

    def list_by_author(self, user_id: int) -> list[Post]:
        """Return a user's posts, newest first."""
        stmt = (
            select(Post)
            .where(Post.user_id == user_id)
            .order_by(desc(Post.created_at), desc(Post.id))
        )
        return list(self.session.scalars(stmt))
