"""
API request and response models for bootcamp-auth REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in auth/models.py, which own the
internal domain representation. Route handlers map between the two.

Request fields are Optional on purpose: completeness and email syntax are
checked by the auth flows (auth/validation.py) so the same rules apply to the
CLI and to HTTP. Pydantic only enforces types and length caps here.

Response models never declare a password field, so the stored hash cannot
leak through serialization.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import AuthResult, SessionClaims, UserRecord

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterBody(BaseModel):
    """Request body for POST /auth/register."""

    username: Optional[str] = Field(default=None, max_length=255)
    name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=255)


class LoginBody(BaseModel):
    """Request body for POST /auth/login. One of username/email is required."""

    username: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=255)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class RegisterResponse(BaseModel):
    """Response body for POST /auth/register (201)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    username: str
    email: str
    access_token: str = Field(alias="accessToken")

    @classmethod
    def from_result(cls, result: AuthResult) -> "RegisterResponse":
        user = result.user
        return cls(
            id=user.id,
            name=user.name,
            username=user.username,
            email=user.email,
            access_token=result.access_token,
        )


class LoginResponse(BaseModel):
    """Response body for POST /auth/login (200)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    access_token: str = Field(alias="accessToken")


class ClaimsResponse(BaseModel):
    """Decoded token claims returned by GET /validate."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str
    role: str
    iat: int
    exp: int
    iss: str

    @classmethod
    def from_claims(cls, claims: SessionClaims) -> "ClaimsResponse":
        return cls(
            user_id=claims.user_id,
            username=claims.username,
            role=claims.role,
            iat=int(claims.issued_at.timestamp()),
            exp=int(claims.expires_at.timestamp()),
            iss=claims.issuer,
        )


class UserResponse(BaseModel):
    """Public profile of an account (GET /auth/me)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    username: str
    name: str
    email: str
    created_at: str = Field(alias="createdAt")
    created_by: str = Field(alias="createdBy")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")
    updated_by: Optional[str] = Field(default=None, alias="updatedBy")

    @classmethod
    def from_user(cls, user: UserRecord) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            name=user.name,
            email=user.email,
            created_at=user.created_at,
            created_by=user.created_by,
            updated_at=user.updated_at,
            updated_by=user.updated_by,
        )


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
