"""Pydantic schemas for the authenticated principal."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel


class AuthenticatedUser(BaseModel):
    """Identity extracted from a validated access token."""

    id: UUID
    email: str | None = None
    role: str = "student"

    @classmethod
    def from_claims(cls, payload: dict[str, Any]) -> "AuthenticatedUser":
        return cls(
            id=payload["sub"],
            email=payload.get("email"),
            role=payload.get("role", "student"),
        )
