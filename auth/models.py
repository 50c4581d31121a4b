"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, near-zero logic). The store and
the flows in auth/service.py do the work; these classes own domain shape.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class UserRecord:
    """A registered account as persisted in the users table.

    password holds the bcrypt hash, never the plaintext. The transport layer
    must not serialize it -- api/models.py response models have no field for it.

    created_by is the account's own id for self-registered users.
    updated_* and deleted_* are persisted and read back but no flow in this
    service writes them yet.
    """

    id: str  # UUID4 string
    name: str
    username: str
    email: str
    password: str  # bcrypt hash
    created_at: str  # ISO 8601 UTC
    created_by: str
    updated_at: str | None = None
    updated_by: str | None = None
    deleted_at: str | None = None
    deleted_by: str | None = None

    @property
    def is_deleted(self) -> bool:
        """Soft-deleted only when both the timestamp and the actor are set."""
        return self.deleted_at is not None and self.deleted_by is not None


@dataclass(frozen=True)
class SessionClaims:
    """Identity facts recovered from a verified access token.

    role carries whatever the issuer put in the role slot. The register and
    login flows put the account email there.
    """

    user_id: str
    username: str
    role: str
    issued_at: datetime
    expires_at: datetime
    issuer: str


@dataclass
class RegistrationRequest:
    name: str | None = None
    username: str | None = None
    email: str | None = None
    password: str | None = None


@dataclass
class LoginRequest:
    """Either username or email identifies the account; password is required."""

    password: str | None = None
    username: str | None = None
    email: str | None = None


@dataclass
class AuthResult:
    """Outcome of a successful register or login: the account plus a fresh token."""

    user: UserRecord
    access_token: str
