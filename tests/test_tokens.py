"""Unit tests for auth/tokens.py -- TokenService issue/verify.

Covers:
- issue/verify round trip returns the identity that was issued
- expiry is exactly one configured lifetime after issuance (fake clock)
- wrong secret, wrong algorithm, "none" algorithm, wrong issuer, missing
  claims and empty tokens all raise UnauthorizedError
"""

import base64
import json
from datetime import timedelta

import pytest
from jose import jwt

from auth.errors import UnauthorizedError
from auth.tokens import TokenService

SECRET = "test-secret-key-with-at-least-32-characters!"
USER_ID = "3f1c2a9e-6a34-4a4b-9d0e-0c1b9f0f6e11"


def _b64(data: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()


class TestRoundTrip:
    def test_verify_returns_issued_identity(self, token_service):
        token = token_service.issue(USER_ID, "alice", "alice@example.com")
        claims = token_service.verify(token)
        assert (claims.user_id, claims.username, claims.role) == (USER_ID, "alice", "alice@example.com")
        assert claims.issuer == "bootcamp"

    def test_expiry_is_one_hour_after_issue(self, token_service, clock):
        claims = token_service.verify(token_service.issue(USER_ID, "alice", "alice@example.com"))
        assert claims.issued_at == clock.now
        assert claims.expires_at - claims.issued_at == timedelta(hours=1)

    def test_token_carries_expected_claim_names(self, token_service):
        token = token_service.issue(USER_ID, "alice", "alice@example.com")
        payload = jwt.get_unverified_claims(token)
        assert set(payload) == {"user_id", "username", "role", "iat", "exp", "iss"}
        assert jwt.get_unverified_header(token)["alg"] == "HS256"


class TestExpiry:
    def test_valid_just_before_expiry(self, token_service, clock):
        token = token_service.issue(USER_ID, "alice", "alice@example.com")
        clock.advance(3599)
        assert token_service.verify(token).username == "alice"

    def test_rejected_at_expiry(self, token_service, clock):
        token = token_service.issue(USER_ID, "alice", "alice@example.com")
        clock.advance(3600)
        with pytest.raises(UnauthorizedError):
            token_service.verify(token)

    def test_rejected_long_after_expiry(self, token_service, clock):
        token = token_service.issue(USER_ID, "alice", "alice@example.com")
        clock.advance(86400)
        with pytest.raises(UnauthorizedError):
            token_service.verify(token)


class TestRejection:
    def test_different_secret_fails(self, token_service, clock):
        other = TokenService("another-secret-key-also-32-characters-long", clock=clock)
        token = other.issue(USER_ID, "alice", "alice@example.com")
        with pytest.raises(UnauthorizedError):
            token_service.verify(token)

    def test_empty_token_fails(self, token_service):
        with pytest.raises(UnauthorizedError):
            token_service.verify("")

    def test_garbage_token_fails(self, token_service):
        with pytest.raises(UnauthorizedError):
            token_service.verify("not.a.jwt")

    def test_other_hmac_algorithm_fails(self, token_service, clock):
        payload = {
            "user_id": USER_ID,
            "username": "alice",
            "role": "alice@example.com",
            "iat": int(clock.now.timestamp()),
            "exp": int(clock.now.timestamp()) + 3600,
            "iss": "bootcamp",
        }
        token = jwt.encode(payload, SECRET, algorithm="HS512")
        with pytest.raises(UnauthorizedError):
            token_service.verify(token)

    def test_none_algorithm_fails(self, token_service, clock):
        payload = {
            "user_id": USER_ID,
            "username": "alice",
            "role": "alice@example.com",
            "exp": int(clock.now.timestamp()) + 3600,
            "iss": "bootcamp",
        }
        token = f"{_b64({'alg': 'none', 'typ': 'JWT'})}.{_b64(payload)}."
        with pytest.raises(UnauthorizedError):
            token_service.verify(token)

    def test_wrong_issuer_fails(self, token_service, clock):
        foreign = TokenService(SECRET, issuer="someone-else", clock=clock)
        with pytest.raises(UnauthorizedError):
            token_service.verify(foreign.issue(USER_ID, "alice", "alice@example.com"))

    def test_missing_claim_fails(self, token_service, clock):
        payload = {"user_id": USER_ID, "exp": int(clock.now.timestamp()) + 3600, "iss": "bootcamp"}
        token = jwt.encode(payload, SECRET, algorithm="HS256")
        with pytest.raises(UnauthorizedError):
            token_service.verify(token)

    def test_tampered_payload_fails(self, token_service):
        token = token_service.issue(USER_ID, "alice", "alice@example.com")
        header, _payload, signature = token.split(".")
        forged = _b64({"user_id": USER_ID, "username": "mallory", "role": "x", "exp": 9999999999, "iss": "bootcamp"})
        with pytest.raises(UnauthorizedError):
            token_service.verify(f"{header}.{forged}.{signature}")


def test_empty_secret_is_rejected_at_construction():
    with pytest.raises(ValueError):
        TokenService("")
