"""Domain error taxonomy shared by the services and the HTTP layer."""

from __future__ import annotations

from fastapi import status


class ForumError(Exception):
    """Base class for failures the HTTP layer translates into responses."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Server error."

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthenticated(ForumError):
    """No session, or a session that is invalid or expired.

    The three cases are deliberately indistinguishable to the caller.
    """

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Not authenticated."


class Forbidden(ForumError):
    """Authenticated caller lacking ownership or the admin role."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Unauthorized."


class NotFound(ForumError):
    """Referenced row does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."


class Conflict(ForumError):
    """Uniqueness violation such as a taken email or username."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Already exists."


class ValidationFailed(ForumError):
    """Input rejected before reaching the store."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Bad request."


class Transient(ForumError):
    """Storage-layer failure surfaced as a generic server error."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Server error."


__all__ = [
    "ForumError",
    "Unauthenticated",
    "Forbidden",
    "NotFound",
    "Conflict",
    "ValidationFailed",
    "Transient",
]
