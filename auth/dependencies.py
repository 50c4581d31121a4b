"""
auth/dependencies.py -- FastAPI Depends() helpers for bearer-token authentication.

require_claims() is the Auth Gate: it runs before every protected handler,
verifies the Authorization: Bearer <token> header with the app's
TokenService, and hands the verified SessionClaims to the handler.

The claims are also stored in the request scope under a module-private
sentinel key. Middleware or helpers further down the call chain read them
with get_request_claims(), which returns a typed value instead of whatever
happens to sit under a string key. Nothing is written to any store.

Layer rule: may import from fastapi (this module is part of FastAPI's
dependency injection system) but not from api/ or core/.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.errors import UnauthorizedError
from auth.models import SessionClaims
from auth.tokens import TokenService

BEARER_PREFIX = "Bearer "

_CLAIMS_KEY = object()


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"code": "unauthorized", "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def require_claims(request: Request) -> SessionClaims:
    """Require a valid bearer token. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(claims: SessionClaims = Depends(require_claims)): ...
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise _unauthorized("Unauthorized: No Authorization header")
    if not auth_header.startswith(BEARER_PREFIX):
        raise _unauthorized("Unauthorized: Authorization header must start with 'Bearer '")

    token_service: TokenService = request.app.state.token_service
    try:
        claims = token_service.verify(auth_header[len(BEARER_PREFIX) :])
    except UnauthorizedError as exc:
        raise _unauthorized("Unauthorized: Invalid token") from exc

    request.scope[_CLAIMS_KEY] = claims
    return claims


def get_request_claims(request: Request) -> SessionClaims | None:
    """Return the claims attached by require_claims(), or None if the gate did not run."""
    claims = request.scope.get(_CLAIMS_KEY)
    return claims if isinstance(claims, SessionClaims) else None
