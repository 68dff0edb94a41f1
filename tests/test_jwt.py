"""
Tests for token issuance / verification and signing-secret resolution.
"""

import json
from base64 import urlsafe_b64decode

import pytest

from auth.jwt import (
    DEV_JWT_SECRET,
    InvalidSignatureError,
    TokenExpiredError,
    TokenService,
    resolve_jwt_secret,
)
from config.settings import Settings

CLAIM = {"id": 7, "email": "ana@test.com", "name": "Ana"}


def _flip(char: str) -> str:
    return "0" if char != "0" else "1"


class TestIssueAndVerify:
    def test_round_trip(self, token_service):
        claim = token_service.verify(token_service.issue(CLAIM))
        assert (claim.id, claim.email, claim.name) == (7, "ana@test.com", "Ana")

    def test_expiry_is_24_hours_after_issue(self, token_service, clock):
        claim = token_service.verify(token_service.issue(CLAIM))
        assert claim.iat == int(clock.now)
        assert claim.exp - claim.iat == 86400

    def test_payload_is_readable_json(self, token_service):
        segment = token_service.issue(CLAIM).split(".")[0]
        payload = json.loads(urlsafe_b64decode(segment + "=" * (-len(segment) % 4)))
        assert payload["id"] == 7
        assert "password" not in payload

    def test_valid_just_before_expiry(self, token_service, clock):
        token = token_service.issue(CLAIM)
        clock.advance(86399)
        assert token_service.verify(token).id == 7

    def test_expired(self, token_service, clock):
        token = token_service.issue(CLAIM)
        clock.advance(86400)
        with pytest.raises(TokenExpiredError):
            token_service.verify(token)


class TestTampering:
    def test_signature_byte_flipped(self, token_service):
        token = token_service.issue(CLAIM)
        tampered = token[:-1] + _flip(token[-1])
        with pytest.raises(InvalidSignatureError):
            token_service.verify(tampered)

    def test_payload_swapped(self, token_service):
        token = token_service.issue(CLAIM)
        other = token_service.issue({**CLAIM, "id": 8})
        forged = other.split(".")[0] + "." + token.split(".")[1]
        with pytest.raises(InvalidSignatureError):
            token_service.verify(forged)

    def test_other_secret(self, token_service, clock):
        foreign = TokenService("another-secret", clock=clock).issue(CLAIM)
        with pytest.raises(InvalidSignatureError):
            token_service.verify(foreign)

    @pytest.mark.parametrize("token", ["", "abc", "a.b.c", ".sig", "payload.", "ünï.cödé"])
    def test_malformed(self, token_service, token):
        with pytest.raises(InvalidSignatureError):
            token_service.verify(token)

    def test_signed_garbage_payload(self, token_service):
        segment = "bm90IGpzb24"  # "not json"
        token = segment + "." + token_service._sign(segment)
        with pytest.raises(InvalidSignatureError):
            token_service.verify(token)

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            TokenService("")


class TestResolveSecret:
    def test_configured_secret_wins(self):
        settings = Settings(environment="production", jwt_secret="s3cret", _env_file=None)
        assert resolve_jwt_secret(settings) == "s3cret"

    def test_development_falls_back_with_warning(self, caplog):
        settings = Settings(environment="development", jwt_secret="", _env_file=None)
        with caplog.at_level("WARNING", logger="auth.jwt"):
            assert resolve_jwt_secret(settings) == DEV_JWT_SECRET
        assert "JWT_SECRET not set" in caplog.text

    def test_production_without_secret_fails(self):
        settings = Settings(environment="production", jwt_secret="", _env_file=None)
        with pytest.raises(RuntimeError, match="JWT_SECRET"):
            resolve_jwt_secret(settings)
