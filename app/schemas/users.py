"""Request/response schemas for admin user management."""

from pydantic import BaseModel, Field, field_validator

from app.core.rbac import UserRole, validate_permissions
from app.core.security import NAME_MAX_LEN, NAME_MIN_LEN
from app.schemas.auth import RegisterRequest, UserProfile, clean_name


class UserCreateRequest(RegisterRequest):
    """Admin-only creation path: caller chooses role and permissions."""

    role: UserRole = UserRole.VIEWER
    permissions: list[str] = Field(default_factory=list)

    @field_validator("permissions")
    @classmethod
    def check_permissions(cls, v: list[str]) -> list[str]:
        return validate_permissions(v)


class UserUpdateRequest(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    role: UserRole | None = None
    permissions: list[str] | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return clean_name(v)

    @field_validator("permissions")
    @classmethod
    def check_permissions(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return None
        return validate_permissions(v)


class UsersListResponse(BaseModel):
    """Response for GET /users (admin only)."""

    users: list[UserProfile]


class MessageResponse(BaseModel):
    message: str
