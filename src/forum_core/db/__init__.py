"""Database configuration and utilities."""

from .session import SessionLocal, ensure_schema, get_db

__all__ = ["get_db", "SessionLocal", "ensure_schema"]
