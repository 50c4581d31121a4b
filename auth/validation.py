"""
auth/validation.py -- Structural checks on register and login input.

RequestValidator is handed to AuthService at construction rather than looked
up from a module global, so tests and alternative deployments can swap in a
stricter pattern without monkeypatching.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import re

from auth.errors import BadRequestError
from auth.models import LoginRequest, RegistrationRequest
from auth.passwords import MAX_PASSWORD_BYTES

EMAIL_PATTERN = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"


def _blank(value: str | None) -> bool:
    return value is None or value == ""


class RequestValidator:
    """Validates RegistrationRequest and LoginRequest before a flow uses them."""

    def __init__(self, email_pattern: str = EMAIL_PATTERN) -> None:
        self._email_re = re.compile(email_pattern)

    def is_valid_email(self, email: str) -> bool:
        return self._email_re.fullmatch(email) is not None

    def validate_registration(self, req: RegistrationRequest) -> None:
        """Raise BadRequestError unless every field is present and well-formed.

        Completeness is checked before syntax so a missing email reports as
        missing, not as malformed.
        """
        missing = [
            name for name in ("name", "username", "email", "password") if _blank(getattr(req, name))
        ]
        if missing:
            raise BadRequestError(f"missing required fields: {', '.join(missing)}")
        if not self.is_valid_email(req.email):
            raise BadRequestError("invalid email format")
        if len(req.password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise BadRequestError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")

    def validate_login(self, req: LoginRequest) -> None:
        if _blank(req.username) and _blank(req.email):
            raise BadRequestError("either username or email is required")
        if _blank(req.password):
            raise BadRequestError("missing required fields: password")
