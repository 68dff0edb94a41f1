"""
User shapes used by the authentication code.

``User`` is the ORM row and carries the password hash; it never leaves
``auth.store``.  Everything handed to callers is a ``PublicUser``, which
has no password field at all.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from database.models import User  # noqa: F401

__all__ = ["User", "PublicUser", "TokenClaim", "AuthResult"]


class PublicUser(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    name: str
    email: str


class TokenClaim(BaseModel):
    """Identity payload embedded in a bearer token."""

    id: int
    email: str
    name: str
    iat: int
    exp: int


class AuthResult(BaseModel):
    user: PublicUser
    token: str
