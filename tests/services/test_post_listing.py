"""Tests for post authoring, editing and listing filters."""

import pytest
from sqlalchemy import event, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from forum_core.core.errors import (
    Forbidden,
    NotFound,
    Transient,
    Unauthenticated,
    ValidationFailed,
)
from forum_core.models import User
from forum_core.repositories.post_repo import PostRepository
from forum_core.repositories.user_repo import UserRepository
from forum_core.services import accounts, posts
from forum_core.services.comments import create_comment
from forum_core.services.votes import post_votes


class TestNormalizeCategories:
    def test_lowercases_and_dedupes(self) -> None:
        assert posts.normalize_categories(["News", "news", " Science "]) == ["news", "science"]

    def test_unknown_names_are_dropped(self) -> None:
        assert posts.normalize_categories(["cooking", "life"]) == ["life"]

    def test_nothing_valid(self) -> None:
        with pytest.raises(ValidationFailed) as exc_info:
            posts.normalize_categories(["cooking"])
        assert exc_info.value.detail == "Please choose valid category."

    def test_too_many(self) -> None:
        with pytest.raises(ValidationFailed) as exc_info:
            posts.normalize_categories(["news", "life", "auto", "games"])
        assert exc_info.value.detail == "You can select up to 3 categories."


class TestCreateAndEdit:
    def test_create_post(self, db_session: Session, test_user: User) -> None:
        post = posts.create_post(
            db_session,
            test_user.id,
            title="  Hello  ",
            content="World",
            categories=["Games", "other"],
            image_url="",
        )

        view = posts.get_post(db_session, post.id, None)
        assert view.post.title == "Hello"
        assert view.post.image_url is None
        assert view.username == "alice"
        assert view.categories == ["games", "other"]
        assert (view.likes, view.dislikes, view.user_vote) == (0, 0, None)

    def test_blank_title_rejected(self, db_session: Session, test_user: User) -> None:
        with pytest.raises(ValidationFailed):
            posts.create_post(
                db_session, test_user.id, title=" ", content="x", categories=["news"]
            )

    def test_author_can_edit(self, db_session: Session, test_user: User, test_post) -> None:
        posts.edit_post(
            db_session,
            test_user.id,
            test_post.id,
            title="Edited",
            content="New body",
            categories=["science", "auto"],
            image_url="/static/uploads/cat.png",
        )

        view = posts.get_post(db_session, test_post.id, test_user.id)
        assert view.post.title == "Edited"
        assert view.post.image_url == "/static/uploads/cat.png"
        assert view.categories == ["auto", "science"]

    def test_admin_cannot_edit(self, db_session: Session, admin_user: User, test_post) -> None:
        with pytest.raises(Forbidden):
            posts.edit_post(
                db_session,
                admin_user.id,
                test_post.id,
                title="Hijack",
                content="x",
                categories=["news"],
            )

    def test_edit_missing_post(self, db_session: Session, test_user: User) -> None:
        with pytest.raises(NotFound):
            posts.edit_post(
                db_session, test_user.id, 5555, title="t", content="c", categories=["news"]
            )

    def test_invalid_categories_leave_post_untouched(
        self, db_session: Session, test_user: User, test_post
    ) -> None:
        with pytest.raises(ValidationFailed):
            posts.edit_post(
                db_session,
                test_user.id,
                test_post.id,
                title="Edited",
                content="c",
                categories=["nope"],
            )
        assert posts.get_post(db_session, test_post.id, None).categories == ["news"]


class TestListing:
    def test_new_is_newest_first(
        self, db_session: Session, make_post, test_user: User
    ) -> None:
        first = make_post(test_user, title="first")
        second = make_post(test_user, title="second")

        views = posts.list_posts(db_session, None)

        assert [v.post.id for v in views] == [second.id, first.id]

    def test_best_orders_by_score(
        self, db_session: Session, make_post, test_user: User, other_user: User
    ) -> None:
        liked = make_post(test_user, title="liked")
        disliked = make_post(test_user, title="disliked")
        neutral = make_post(test_user, title="neutral")
        engine = post_votes(db_session)
        engine.like(test_user.id, liked.id)
        engine.like(other_user.id, liked.id)
        engine.dislike(other_user.id, disliked.id)

        views = posts.list_posts(db_session, None, filter_name="best")

        assert [v.post.id for v in views] == [liked.id, neutral.id, disliked.id]

    def test_personal_filters(
        self, db_session: Session, make_post, test_user: User, other_user: User
    ) -> None:
        mine = make_post(test_user, title="mine")
        theirs = make_post(other_user, title="theirs")
        disliked = make_post(other_user, title="disliked")
        post_votes(db_session).like(test_user.id, theirs.id)
        post_votes(db_session).dislike(test_user.id, disliked.id)
        create_comment(db_session, test_user.id, disliked.id, "meh, not great")

        def ids(filter_name: str) -> list[int]:
            views = posts.list_posts(db_session, test_user.id, filter_name=filter_name)
            return [v.post.id for v in views]

        assert ids("my") == [mine.id]
        assert ids("liked") == [theirs.id]
        assert ids("commented") == [disliked.id]

    def test_personal_filter_requires_login(self, db_session: Session) -> None:
        with pytest.raises(Unauthenticated):
            posts.list_posts(db_session, None, filter_name="liked")

    def test_category_filter(
        self, db_session: Session, make_post, test_user: User
    ) -> None:
        make_post(test_user, categories=("news",))
        games = make_post(test_user, categories=("games", "life"))

        views = posts.list_posts(db_session, None, category="games")

        assert [v.post.id for v in views] == [games.id]

    @pytest.mark.parametrize(
        ("filter_name", "category"),
        [("hot", None), ("new", "cooking")],
    )
    def test_invalid_values(self, db_session: Session, filter_name, category) -> None:
        with pytest.raises(ValidationFailed):
            posts.list_posts(db_session, None, filter_name=filter_name, category=category)

    def test_views_include_viewer_vote_and_comments(
        self, db_session: Session, test_user: User, other_user: User, test_post
    ) -> None:
        post_votes(db_session).dislike(other_user.id, test_post.id)
        create_comment(db_session, other_user.id, test_post.id, "first comment")

        (view,) = posts.list_posts(db_session, other_user.id)

        assert view.user_vote == -1
        assert view.dislikes == 1
        assert [c.username for c in view.comments] == ["bob"]

    def test_get_missing_post(self, db_session: Session) -> None:
        with pytest.raises(NotFound):
            posts.get_post(db_session, 31337, None)

    def test_views_carry_each_posts_author_and_categories(
        self, db_session: Session, make_post, test_user: User, other_user: User
    ) -> None:
        alices = make_post(test_user, categories=("science", "news"))
        bobs = make_post(other_user, categories=("auto",))

        views = {v.post.id: v for v in posts.list_posts(db_session, None)}

        assert views[alices.id].username == "alice"
        assert views[alices.id].categories == ["news", "science"]
        assert views[bobs.id].username == "bob"
        assert views[bobs.id].categories == ["auto"]

    def test_author_and_category_lookups_are_batched(
        self, engine: Engine, db_session: Session, make_post, test_user: User, other_user: User
    ) -> None:
        statements: list[str] = []

        def _record(conn, cursor, statement, parameters, context, executemany) -> None:
            statements.append(statement)

        def count_listing() -> int:
            db_session.scalar(select(1))
            statements.clear()
            event.listen(engine, "before_cursor_execute", _record)
            try:
                posts.list_posts(db_session, None, with_comments=False)
            finally:
                event.remove(engine, "before_cursor_execute", _record)
            return len(statements)

        make_post(test_user)
        single = count_listing()
        for author in (test_user, other_user, other_user, test_user):
            make_post(author, categories=("life", "games"))
        many = count_listing()

        # Only the per-post vote counts scale with the number of posts.
        assert many - single == 4


class TestStoreFailures:
    @pytest.fixture()
    def rollbacks(self, db_session: Session, monkeypatch: pytest.MonkeyPatch) -> list[bool]:
        calls: list[bool] = []
        real_rollback = db_session.rollback

        def _rollback() -> None:
            calls.append(True)
            real_rollback()

        monkeypatch.setattr(db_session, "rollback", _rollback)
        return calls

    @staticmethod
    def _boom(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    def test_listing_failure_rolls_back(
        self, db_session: Session, rollbacks: list[bool], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(PostRepository, "list_filtered", self._boom)

        with pytest.raises(Transient):
            posts.list_posts(db_session, None)
        assert rollbacks

    def test_get_post_failure_rolls_back(
        self, db_session: Session, rollbacks: list[bool], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(PostRepository, "get_by_id", self._boom)

        with pytest.raises(Transient):
            posts.get_post(db_session, 1, None)
        assert rollbacks

    def test_profile_failure_rolls_back(
        self, db_session: Session, rollbacks: list[bool], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(UserRepository, "get_by_id", self._boom)

        with pytest.raises(Transient):
            accounts.get_profile(db_session, 1)
        assert rollbacks
