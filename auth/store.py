"""
Credential store — persistence for user records.

Emails are lowercased before every write and lookup.  Password hashes stay
inside this module: every public method returns ``PublicUser`` views.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.errors import DuplicateEmailError
from auth.models import PublicUser, User
from auth.password import PasswordHasher

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CredentialStore:
    """Repository for user records bound to one request's session."""

    def __init__(self, session: AsyncSession, hasher: PasswordHasher | None = None) -> None:
        self.session = session
        self.hasher = hasher or PasswordHasher()

    async def _find_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.email == normalize_email(email)).limit(1)
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: int) -> Optional[PublicUser]:
        user = await self.session.get(User, user_id)
        return PublicUser.model_validate(user) if user is not None else None

    async def get_by_email(self, email: str) -> Optional[PublicUser]:
        user = await self._find_by_email(email)
        return PublicUser.model_validate(user) if user is not None else None

    async def create(self, name: str, email: str, password: str) -> PublicUser:
        """
        Insert a new user and return its public view.

        The existence check gives a fast answer for the common case; the
        unique constraint on ``users.email`` settles concurrent inserts, and
        its ``IntegrityError`` is reported the same way.
        """
        normalized = normalize_email(email)
        if await self._find_by_email(normalized) is not None:
            raise DuplicateEmailError()

        user = User(
            name=name,
            email=normalized,
            password_hash=await self.hasher.hash(password),
        )
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self.session.rollback()
            logger.info("Unique constraint rejected duplicate email on insert")
            raise DuplicateEmailError() from exc

        return PublicUser.model_validate(user)

    async def validate_credentials(self, email: str, password: str) -> Optional[PublicUser]:
        """Return the user when the password matches, ``None`` otherwise."""
        user = await self._find_by_email(email)
        if user is None:
            # Same bcrypt cost as a wrong password.
            await self.hasher.burn(password)
            return None
        if not await self.hasher.verify(password, user.password_hash):
            return None
        return PublicUser.model_validate(user)
