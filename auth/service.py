"""
auth/service.py -- Registration and login flows.

AuthService orchestrates the three leaves of the auth core:
  passwords (hash/verify) + UserStore (create/lookup) + TokenService (issue).

Every collaborator is injected through the constructor. The service keeps no
mutable state, so one instance is shared by all concurrent requests.

Error behaviour:
  Store errors (ConflictError, InternalError) propagate unchanged. The login
  flow collapses "unknown account" and "wrong password" into one generic
  UnauthorizedError so responses cannot be used to enumerate usernames or
  emails. Unknown accounts still pay for one bcrypt verification.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
import uuid

from auth.errors import NotFoundError, UnauthorizedError
from auth.models import AuthResult, LoginRequest, RegistrationRequest, UserRecord
from auth.passwords import equalize_timing, hash_password, verify_password
from auth.store import UserStore, now_iso
from auth.tokens import TokenService
from auth.validation import RequestValidator

logger = logging.getLogger("bootcamp.auth")

INVALID_CREDENTIALS = "invalid credentials"


class AuthService:
    """Register and log in users.

    Usage:
        service = AuthService(store, TokenService(secret))
        result = service.register(RegistrationRequest(name=..., username=..., email=..., password=...))
        result.access_token
    """

    def __init__(
        self,
        store: UserStore,
        tokens: TokenService,
        validator: RequestValidator | None = None,
    ) -> None:
        self.store = store
        self.tokens = tokens
        self.validator = validator or RequestValidator()

    def register(self, req: RegistrationRequest) -> AuthResult:
        """Create an account and return it with a fresh access token.

        Raises BadRequestError for incomplete or malformed input,
        ConflictError when the id, email or username is taken, and
        InternalError for hashing, storage or signing failures. Nothing is
        persisted unless the insert succeeds.
        """
        self.validator.validate_registration(req)

        hashed = hash_password(req.password)
        user_id = str(uuid.uuid4())
        user = UserRecord(
            id=user_id,
            name=req.name,
            username=req.username,
            email=req.email,
            password=hashed,
            created_at=now_iso(),
            created_by=user_id,
        )
        self.store.create_user(user)

        token = self.tokens.issue(user.id, user.username, user.email)
        logger.info("Registered user id=%s", user.id)
        return AuthResult(user=user, access_token=token)

    def login(self, req: LoginRequest) -> AuthResult:
        """Resolve the account by username (then email), verify the password, issue a token.

        The email fallback only happens when the username lookup reports
        NotFoundError; a storage failure surfaces as InternalError at once.
        """
        self.validator.validate_login(req)

        user = self._resolve(req)
        if user is None:
            equalize_timing(req.password)
            logger.info("Login failed: unknown account")
            raise UnauthorizedError(INVALID_CREDENTIALS)
        if not verify_password(req.password, user.password):
            logger.info("Login failed: bad password for user id=%s", user.id)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        token = self.tokens.issue(user.id, user.username, user.email)
        logger.info("Login succeeded for user id=%s", user.id)
        return AuthResult(user=user, access_token=token)

    def _resolve(self, req: LoginRequest) -> UserRecord | None:
        if req.username:
            try:
                return self.store.get_by_username(req.username)
            except NotFoundError:
                if not req.email:
                    return None
        try:
            return self.store.get_by_email(req.email)
        except NotFoundError:
            return None
