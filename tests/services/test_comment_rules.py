"""Tests for comment validation and listing."""

import pytest
from sqlalchemy.orm import Session

from forum_core.core.errors import NotFound, ValidationFailed
from forum_core.models import User
from forum_core.services.comments import (
    comment_views,
    create_comment,
    validate_comment_content,
)
from forum_core.services.votes import comment_votes


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("   ", "Comment content cannot be empty or contain only whitespace."),
        (" ab ", "Comment must be at least 3 characters long."),
        ("x" * 501, "Comment cannot be longer than 500 characters."),
    ],
)
def test_invalid_content(content: str, message: str) -> None:
    with pytest.raises(ValidationFailed) as exc_info:
        validate_comment_content(content)
    assert exc_info.value.detail == message


def test_content_is_trimmed() -> None:
    assert validate_comment_content("  abc  ") == "abc"
    assert validate_comment_content("y" * 500) == "y" * 500


def test_comment_on_missing_post(db_session: Session, test_user: User) -> None:
    with pytest.raises(NotFound) as exc_info:
        create_comment(db_session, test_user.id, 8080, "hello there")
    assert exc_info.value.detail == "Post not found."


def test_comment_views_oldest_first_with_votes(
    db_session: Session, test_user: User, other_user: User, test_post
) -> None:
    first = create_comment(db_session, other_user.id, test_post.id, "first one")
    second = create_comment(db_session, test_user.id, test_post.id, "second one")
    comment_votes(db_session).like(test_user.id, first.id)

    views = comment_views(db_session, test_post.id, test_user.id)

    assert [v.comment.id for v in views] == [first.id, second.id]
    assert [v.username for v in views] == ["bob", "alice"]
    assert (views[0].likes, views[0].user_vote) == (1, 1)
    assert (views[1].likes, views[1].user_vote) == (0, None)
