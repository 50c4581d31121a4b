"""
api/routes/v1/auth.py -- Registration, login and token validation endpoints.

Routes:
  POST /auth/register   -- create an account; 201 with profile + accessToken
  POST /auth/login      -- username or email + password; 200 with accessToken
  GET  /validate        -- decoded claims of the presented bearer token
  GET  /auth/me         -- profile of the account behind the bearer token

Handlers are thin: they map the Pydantic body onto the domain request, call
AuthService, and map the result back. AuthError subclasses raised by the
service are turned into status codes by the handlers in api/main.py.

Security:
  Cache-Control: no-store on register and login responses (they carry tokens).
  Login returns one generic error for unknown account and wrong password.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from api.models import ClaimsResponse, LoginBody, LoginResponse, RegisterBody, RegisterResponse, UserResponse
from auth.dependencies import get_request_claims, require_claims
from auth.errors import UnauthorizedError
from auth.models import LoginRequest, RegistrationRequest, SessionClaims
from auth.service import AuthService

# Auth policy:
# - POST /auth/register: public
# - POST /auth/login:    public
# - GET  /validate:      requires bearer token (require_claims)
# - GET  /auth/me:       requires bearer token (require_claims), reads the
#                        claims back with get_request_claims
router = APIRouter()


def _service(request: Request) -> AuthService:
    return request.app.state.auth_service


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/register", response_model=RegisterResponse, status_code=201)
def register(request: Request, response: Response, body: RegisterBody) -> RegisterResponse:
    """Register a new account and return it with an access token."""
    result = _service(request).register(
        RegistrationRequest(
            name=body.name,
            username=body.username,
            email=body.email,
            password=body.password,
        )
    )
    response.headers["Cache-Control"] = "no-store"
    return RegisterResponse.from_result(result)


@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, response: Response, body: LoginBody) -> LoginResponse:
    """Authenticate with username (or email) and password."""
    result = _service(request).login(
        LoginRequest(
            username=body.username,
            email=body.email,
            password=body.password,
        )
    )
    response.headers["Cache-Control"] = "no-store"
    return LoginResponse(access_token=result.access_token)


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/validate", response_model=ClaimsResponse)
def validate(claims: SessionClaims = Depends(require_claims)) -> ClaimsResponse:
    """Return the claims carried by the presented token."""
    return ClaimsResponse.from_claims(claims)


@router.get("/auth/me", response_model=UserResponse, dependencies=[Depends(require_claims)])
def me(request: Request) -> UserResponse:
    """Return the stored profile of the authenticated account."""
    claims = get_request_claims(request)
    if claims is None:
        raise UnauthorizedError("no verified claims on request")
    user = _service(request).store.get_by_id(claims.user_id)
    return UserResponse.from_user(user)
