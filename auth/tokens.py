"""
auth/tokens.py -- Signed, time-limited session tokens (JWT, HS256).

Security design decisions:
  python-jose with HS256. Tokens carry user_id, username, role, iat, exp and
  iss, signed with the process-wide SECRET_KEY. The token service holds no
  mutable state: a token is valid for its whole lifetime once issued, and
  there is no refresh or revocation.

  Only HS256 is accepted on decode. A token whose header names any other
  algorithm (including "none") is rejected by jose before the signature check.

  Expiry is compared against the injected clock rather than jose's own
  wall-clock check, so tests can move time forward without sleeping.

  verify() raises UnauthorizedError on every failure. The Auth Gate turns that
  into a 401; callers never have to distinguish why a token was refused.

Layer rule: no imports from api/. TokenService.from_settings() is the only
place the core touches configuration, and it receives the Settings object
rather than importing the singleton.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from jose import JWTError, jwt

from auth.errors import InternalError, UnauthorizedError
from auth.models import SessionClaims

if TYPE_CHECKING:
    from core.config import Settings

logger = logging.getLogger("bootcamp.auth")

ALGORITHM = "HS256"
DEFAULT_ISSUER = "bootcamp"
DEFAULT_EXPIRE_SECONDS = 3600

_REQUIRED_CLAIMS = ("user_id", "username", "role", "exp", "iss")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issues and verifies access tokens with a single symmetric secret.

    Usage:
        tokens = TokenService(secret_key)
        token = tokens.issue(user.id, user.username, user.email)
        claims = tokens.verify(token)

    clock is a zero-argument callable returning an aware UTC datetime.
    """

    def __init__(
        self,
        secret_key: str,
        expire_seconds: int = DEFAULT_EXPIRE_SECONDS,
        issuer: str = DEFAULT_ISSUER,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._secret_key = secret_key
        self._lifetime = timedelta(seconds=expire_seconds)
        self._issuer = issuer
        self._clock = clock or _utcnow

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenService:
        return cls(
            settings.secret_key,
            expire_seconds=settings.token_expire_seconds,
            issuer=settings.token_issuer,
        )

    @property
    def expire_seconds(self) -> int:
        return int(self._lifetime.total_seconds())

    def issue(self, user_id: str, username: str, role: str) -> str:
        """Encode a signed token for the given identity.

        exp = now + the configured lifetime. Raises InternalError if signing
        fails.
        """
        issued_at = self._clock()
        payload = {
            "user_id": str(user_id),
            "username": username,
            "role": role,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._lifetime).timestamp()),
            "iss": self._issuer,
        }
        try:
            return jwt.encode(payload, self._secret_key, algorithm=ALGORITHM)
        except JWTError as exc:
            logger.error("Token signing failed for user_id=%s", user_id)
            raise InternalError("token signing failed") from exc

    def verify(self, token: str) -> SessionClaims:
        """Decode and verify a token. Returns the claims or raises UnauthorizedError."""
        if not token:
            raise UnauthorizedError("token is empty")
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[ALGORITHM],
                issuer=self._issuer,
                options={"verify_exp": False, "verify_aud": False},
            )
        except JWTError as exc:
            logger.debug("Token rejected: %s", exc)
            raise UnauthorizedError("invalid token") from exc

        claims = self._claims_from_payload(payload)
        if claims.expires_at <= self._clock():
            raise UnauthorizedError("token has expired")
        return claims

    @staticmethod
    def _claims_from_payload(payload: dict) -> SessionClaims:
        missing = [name for name in _REQUIRED_CLAIMS if name not in payload]
        if missing:
            raise UnauthorizedError(f"token is missing claims: {', '.join(missing)}")
        try:
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
            issued_at = datetime.fromtimestamp(int(payload.get("iat", payload["exp"])), tz=timezone.utc)
        except (TypeError, ValueError, OverflowError) as exc:
            raise UnauthorizedError("token timestamps are malformed") from exc
        for name in ("user_id", "username", "role"):
            if not isinstance(payload[name], str):
                raise UnauthorizedError(f"token claim {name} is malformed")
        return SessionClaims(
            user_id=payload["user_id"],
            username=payload["username"],
            role=payload["role"],
            issued_at=issued_at,
            expires_at=expires_at,
            issuer=payload["iss"],
        )
