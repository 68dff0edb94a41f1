"""
Auth service: the register, login and current-user flows.

Composes the credential store and the token service.  Input is validated
before any store access; credential and token failures are reported with
one generic message each so callers cannot probe which part was wrong.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, EmailStr, field_validator
from pydantic import ValidationError as PydanticValidationError

from auth.errors import (
    InvalidCredentialsError,
    NotFound,
    Unauthorized,
    ValidationError,
)
from auth.jwt import TokenError, TokenService
from auth.models import AuthResult, PublicUser
from auth.password import MAX_PASSWORD_BYTES
from auth.store import CredentialStore

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _bare_address(value: Any) -> Any:
    # EmailStr also accepts "Name <addr>" and keeps only addr.
    if isinstance(value, str) and any(ch in value for ch in "<>\""):
        raise ValueError("Email must be a plain address without a display name")
    return value


# ── Input schemas ──────────────────────────────────────────────────────


class RegisterInput(BaseModel):
    name: str
    email: EmailStr
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def _email_is_bare(cls, value: Any) -> Any:
        return _bare_address(value)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        if len(value) > 255:
            raise ValueError("Name must be at most 255 characters")
        return value

    @field_validator("password")
    @classmethod
    def _password_policy(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        if len(value.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class LoginInput(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def _email_is_bare(cls, value: Any) -> Any:
        return _bare_address(value)

    @field_validator("password")
    @classmethod
    def _password_present(cls, value: str) -> str:
        if not value:
            raise ValueError("Password is required")
        return value


def field_errors(exc: PydanticValidationError) -> List[Dict[str, str]]:
    """Flatten pydantic errors into ``[{field, message}]``."""
    errors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "body"
        message = err["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": field, "message": message})
    return errors


def _validate(schema: Type[BaseModel], data: Dict[str, Any]) -> Any:
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(field_errors(exc)) from exc


# ── Service ────────────────────────────────────────────────────────────


class AuthService:
    def __init__(self, store: CredentialStore, tokens: TokenService) -> None:
        self.store = store
        self.tokens = tokens

    def _issue(self, user: PublicUser) -> AuthResult:
        token = self.tokens.issue({"id": user.id, "email": user.email, "name": user.name})
        return AuthResult(user=user, token=token)

    async def register(self, name: str, email: str, password: str) -> AuthResult:
        """Create a user and return it with a fresh token."""
        data = _validate(
            RegisterInput, {"name": name, "email": email, "password": password}
        )
        user = await self.store.create(data.name, data.email, data.password)
        logger.info("Registered user %s", user.id)
        return self._issue(user)

    async def login(self, email: str, password: str) -> AuthResult:
        """Check credentials and return the user with a fresh token."""
        data = _validate(LoginInput, {"email": email, "password": password})
        user = await self.store.validate_credentials(data.email, data.password)
        if user is None:
            logger.info("Login rejected")
            raise InvalidCredentialsError()
        logger.info("Login: user %s", user.id)
        return self._issue(user)

    async def resolve_identity(self, authorization: Optional[str]) -> PublicUser:
        """
        Resolve the current user from an ``Authorization`` header value.

        Only the claim's ``id`` is trusted; name and email come from the
        store.
        """
        scheme, _, token = (authorization or "").partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            raise Unauthorized("Unauthorized - token not provided")

        try:
            claim = self.tokens.verify(token)
        except TokenError as exc:
            logger.info("Token rejected: %s", exc)
            raise Unauthorized() from exc

        user = await self.store.get_by_id(claim.id)
        if user is None:
            raise NotFound()
        return user
