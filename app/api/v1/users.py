"""Admin user management: list, create, update role/permissions, delete."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_session_manager, get_user_store, require
from app.core.rbac import ADMIN_ONLY
from app.schemas.auth import CurrentUser, UserProfile
from app.schemas.users import (
    MessageResponse,
    UserCreateRequest,
    UsersListResponse,
    UserUpdateRequest,
)
from app.services.auth import SessionManager
from app.services.errors import DuplicateEmail
from app.services.user_store import UserStore

logger = logging.getLogger(__name__)
router = APIRouter()

AdminUser = Annotated[CurrentUser, Depends(require(ADMIN_ONLY))]


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


@router.get("", response_model=UsersListResponse)
def list_users(
    _admin: AdminUser,
    store: Annotated[UserStore, Depends(get_user_store)],
) -> UsersListResponse:
    users = store.list_users()
    return UsersListResponse(users=[UserProfile.model_validate(u) for u in users])


@router.post("", response_model=UserProfile, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreateRequest,
    admin: AdminUser,
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> UserProfile:
    """
    Create a user with an explicit role and permissions.
    Unlike /auth/register this does not log the new user in.
    """
    try:
        user = sessions.create_user(body, role=body.role, permissions=body.permissions)
    except DuplicateEmail as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e
    logger.info("Admin id=%s created user id=%s", admin.id, user.id)
    return UserProfile.model_validate(user)


@router.patch("/{user_id}", response_model=UserProfile)
def update_user(
    user_id: str,
    body: UserUpdateRequest,
    _admin: AdminUser,
    store: Annotated[UserStore, Depends(get_user_store)],
) -> UserProfile:
    user = store.update_user(
        user_id,
        name=body.name,
        role=body.role,
        permissions=body.permissions,
    )
    if user is None:
        raise _not_found()
    return UserProfile.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    admin: AdminUser,
    store: Annotated[UserStore, Depends(get_user_store)],
) -> MessageResponse:
    if not store.delete_user(user_id):
        raise _not_found()
    logger.info("Admin id=%s deleted user id=%s", admin.id, user_id)
    return MessageResponse(message="User deleted successfully")
