"""Password hashing and session token utilities."""
from __future__ import annotations

import secrets

import bcrypt

SESSION_TOKEN_BYTES = 32


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash of ``password``."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Return True if ``password`` matches the stored hash.

    Malformed hashes are treated as a mismatch rather than an error.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def new_session_token() -> str:
    """Return an unguessable URL-safe session token."""
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)
