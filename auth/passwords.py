"""
auth/passwords.py -- One-way password hashing with bcrypt.

Security design decisions:
  bcrypt directly (no passlib wrapper). passlib's wrap-bug detection builds a
  password longer than 72 bytes, which bcrypt 4.x+ rejects with an explicit
  error. Direct usage is simpler and has no compatibility shim.

  Cost factor: bcrypt.gensalt() default (12 rounds). Not configurable -- the
  vetted default is the only supported setting.

  72-byte limit: bcrypt only looks at the first 72 bytes of its input and
  newer releases refuse longer input outright. auth/validation.py rejects such
  passwords at registration, so hash_password() never sees one.

  Timing equalization: _DUMMY_HASH is computed once at import so the login
  flow can burn one bcrypt verification when the account does not exist.
  Response time then does not reveal whether a username or email is known.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import bcrypt

from auth.errors import InternalError

MAX_PASSWORD_BYTES = 72


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Raises InternalError if bcrypt itself fails (entropy source or resource
    exhaustion); the caller never gets a partial hash.
    """
    try:
        return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
    except (ValueError, TypeError, RuntimeError) as exc:
        raise InternalError("password hashing failed") from exc


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    Never raises: a malformed or truncated hash simply does not match.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


_DUMMY_HASH: str = hash_password("bootcamp_timing_dummy")


def equalize_timing(plain: str) -> None:
    """Spend one bcrypt verification without a real hash to compare against."""
    verify_password(plain, _DUMMY_HASH)
