"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.  The async variants run bcrypt in a
worker thread so a slow hash never stalls the event loop.
"""

from __future__ import annotations

import asyncio
import secrets

import bcrypt

from config.settings import config

# bcrypt silently ignores (or rejects, depending on version) input past this.
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password with bcrypt (auto-salted, work factor from config)."""
    salt = bcrypt.gensalt(rounds=rounds or config.bcrypt_rounds)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except (ValueError, TypeError):
        return False


async def hash_password_async(password: str, rounds: int | None = None) -> str:
    return await asyncio.to_thread(hash_password, password, rounds)


async def verify_password_async(password: str, password_hash: str) -> bool:
    return await asyncio.to_thread(verify_password, password, password_hash)


class PasswordHasher:
    """Binds a work factor to the async hashing helpers."""

    def __init__(self, rounds: int | None = None) -> None:
        self.rounds = rounds or config.bcrypt_rounds
        self._dummy_hash: str | None = None

    async def hash(self, password: str) -> str:
        return await hash_password_async(password, self.rounds)

    async def verify(self, password: str, password_hash: str) -> bool:
        return await verify_password_async(password, password_hash)

    async def dummy_hash(self) -> str:
        """A hash of a random value at this work factor, built once per hasher."""
        if self._dummy_hash is None:
            self._dummy_hash = await self.hash(secrets.token_urlsafe(16))
        return self._dummy_hash

    async def burn(self, password: str) -> None:
        """Spend one verification's worth of work when there is no real hash to check."""
        await self.verify(password, await self.dummy_hash())
