"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.core.rbac import UserRole
from app.core.security import (
    EMAIL_MAX_LEN,
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
)


def clean_name(value: str) -> str:
    """Strip a display name; raise ValueError if nothing is left."""
    name = value.strip()
    if not name:
        raise ValueError("Name must not be blank")
    return name


class RegisterRequest(BaseModel):
    """Self-registration draft; the account is created with role VIEWER."""

    name: str = Field(..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN, description="Display name")
    email: EmailStr = Field(..., description="Login email")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return clean_name(v)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        # EmailStr only lower-cases the domain; stored emails are fully lower-case.
        return v.lower()


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(..., min_length=1, max_length=EMAIL_MAX_LEN, description="Login email")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        # No shape check here: a malformed email is just an unknown account.
        return v.strip().lower()


class RefreshRequest(BaseModel):
    """Refresh token presented for rotation."""

    refresh_token: str = Field(..., min_length=1, max_length=4096)


class UserProfile(BaseModel):
    """Public projection of a user: never carries password or token hashes."""

    id: str
    email: str
    name: str
    role: UserRole
    permissions: list[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    """Access/refresh token pair plus the authenticated user's profile."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    user: UserProfile


class CurrentUser(BaseModel):
    """Authenticated identity resolved from an access token (no DB lookup)."""

    id: str
    email: str
    role: UserRole
