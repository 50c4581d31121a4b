"""
auth/errors.py -- Error taxonomy shared by the store, the token service and the flows.

Every failure the auth core can produce is one of five kinds. The core raises
them; api/main.py maps each kind to an HTTP status and the standard error
envelope. Keeping the mapping out of this module preserves the layer rule:
auth/ knows nothing about HTTP.

  BadRequestError    -- malformed or incomplete input, bad email syntax
  UnauthorizedError  -- missing/invalid/expired token, failed login
  ConflictError      -- duplicate id/email/username at creation
  NotFoundError      -- lookup miss (the login flow turns it into Unauthorized)
  InternalError      -- hashing, storage or signing failure

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class. code is the machine-readable value placed in the error envelope."""

    code = "auth_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequestError(AuthError):
    code = "bad_request"


class UnauthorizedError(AuthError):
    code = "unauthorized"


class ConflictError(AuthError):
    """A uniqueness rule would be violated.

    reason names the clashing field: "id", "email" or "username".
    """

    code = "conflict"

    def __init__(self, reason: str, message: str | None = None) -> None:
        super().__init__(message or f"A user with that {reason} already exists.")
        self.reason = reason


class NotFoundError(AuthError):
    code = "not_found"

    def __init__(self, entity: str = "user") -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity


class InternalError(AuthError):
    """Server-side failure. The message is for logs; clients get a generic text."""

    code = "internal_error"
