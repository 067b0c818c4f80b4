"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel


class StatusResponse(BaseModel):
    """Outcome envelope used by mutating endpoints."""

    success: bool = True
    message: str
