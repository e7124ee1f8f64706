"""Pydantic request/response schemas."""

from app.schemas.auth import (
    CurrentUser,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserProfile,
)
from app.schemas.users import (
    MessageResponse,
    UserCreateRequest,
    UsersListResponse,
    UserUpdateRequest,
)

__all__ = [
    "CurrentUser",
    "LoginRequest",
    "MessageResponse",
    "RefreshRequest",
    "RegisterRequest",
    "TokenResponse",
    "UserCreateRequest",
    "UserProfile",
    "UsersListResponse",
    "UserUpdateRequest",
]
