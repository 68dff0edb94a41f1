"""
JWT-style token creation and verification.

Tokens are base64url-encoded JSON payloads signed with HMAC-SHA256::

    <base64url(payload)>.<hex signature>

The payload carries the identity claim (``id``, ``email``, ``name``) plus
``iat`` / ``exp`` epoch seconds.  The secret is resolved once at startup
from ``config.jwt_secret`` (env var: ``JWT_SECRET``) and handed to
``TokenService`` explicitly.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Any, Callable, Dict

from pydantic import ValidationError as PydanticValidationError

from auth.models import TokenClaim
from config.settings import Settings

logger = logging.getLogger(__name__)

# Only ever used outside production; see resolve_jwt_secret().
DEV_JWT_SECRET = "auth_system_jwt_secret"


class TokenError(Exception):
    """Base exception for token verification failures."""


class InvalidSignatureError(TokenError):
    """Raised when a token is malformed or its signature does not match."""


class TokenExpiredError(TokenError):
    """Raised when a token is past its ``exp`` timestamp."""


def resolve_jwt_secret(settings: Settings) -> str:
    """
    Pick the signing secret for this process.

    A configured ``JWT_SECRET`` always wins.  Without one, development and
    test environments fall back to ``DEV_JWT_SECRET`` with a warning; any
    other environment refuses to start.
    """
    if settings.jwt_secret:
        return settings.jwt_secret
    if settings.is_development:
        logger.warning(
            "JWT_SECRET not set, using the built-in development secret. "
            "Tokens signed with it are forgeable; set JWT_SECRET before deploying."
        )
        return DEV_JWT_SECRET
    raise RuntimeError(
        f"JWT_SECRET must be set when ENVIRONMENT={settings.environment!r}"
    )


def _b64encode(raw: bytes) -> str:
    return urlsafe_b64encode(raw).rstrip(b"=").decode()


def _b64decode(segment: str) -> bytes:
    return urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


class TokenService:
    """Issues and verifies signed, time-limited bearer tokens."""

    def __init__(
        self,
        secret: str,
        expiry_seconds: int = 86400,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("TokenService requires a non-empty secret")
        self._secret = secret.encode()
        self.expiry_seconds = expiry_seconds
        self._clock = clock

    def _sign(self, segment: str) -> str:
        return hmac.new(self._secret, segment.encode("utf-8", "replace"), hashlib.sha256).hexdigest()

    def issue(self, claim: Dict[str, Any]) -> str:
        """Create a signed token for ``{id, email, name}``."""
        now = int(self._clock())
        payload = {
            "id": claim["id"],
            "email": claim["email"],
            "name": claim["name"],
            "iat": now,
            "exp": now + self.expiry_seconds,
        }
        segment = _b64encode(json.dumps(payload, separators=(",", ":")).encode())
        return segment + "." + self._sign(segment)

    def verify(self, token: str) -> TokenClaim:
        """
        Verify token and return its claim.

        Raises ``InvalidSignatureError`` for malformed or tampered tokens and
        ``TokenExpiredError`` once ``exp`` has passed.  The claim is not
        checked against the user store.
        """
        parts = token.split(".")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise InvalidSignatureError("bad format")

        segment, signature = parts
        if not hmac.compare_digest(signature.encode(), self._sign(segment).encode()):
            raise InvalidSignatureError("bad signature")

        try:
            claim = TokenClaim.model_validate(json.loads(_b64decode(segment)))
        except (ValueError, PydanticValidationError) as exc:
            raise InvalidSignatureError("bad payload") from exc

        if self._clock() >= claim.exp:
            raise TokenExpiredError("token expired")
        return claim
