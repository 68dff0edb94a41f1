"""
FastAPI dependencies for authentication.

Provides ``db_session``, ``get_auth_service`` and ``get_current_user``.
The token service and password hasher are built once in ``create_app``
and stored on ``app.state``; sessions are per request.
"""

from __future__ import annotations

from typing import AsyncGenerator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import TokenService
from auth.models import PublicUser
from auth.password import PasswordHasher
from auth.service import AuthService
from auth.store import CredentialStore
from database.session import get_db_session


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_auth_service(
    session: AsyncSession = Depends(db_session),
    tokens: TokenService = Depends(get_token_service),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> AuthService:
    return AuthService(CredentialStore(session, hasher), tokens)


async def get_current_user(
    authorization: Optional[str] = Header(None),
    service: AuthService = Depends(get_auth_service),
) -> PublicUser:
    """Resolve the authenticated user from the ``Authorization`` header."""
    return await service.resolve_identity(authorization)
