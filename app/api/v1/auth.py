"""Auth endpoints: register, login, refresh, logout and the caller's profile."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_current_user, get_session_manager, get_user_store
from app.schemas.auth import (
    CurrentUser,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserProfile,
)
from app.services.auth import SessionManager, SessionTokens
from app.services.errors import AuthError, DuplicateEmail
from app.services.user_store import UserStore

router = APIRouter()


def _token_response(tokens: SessionTokens) -> TokenResponse:
    return TokenResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        token_type="bearer",
        user=tokens.user,
    )


def _unauthorized(e: AuthError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=e.message,
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> TokenResponse:
    """Create a VIEWER account and return a token pair for it."""
    try:
        tokens = sessions.register(body)
    except DuplicateEmail as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e
    return _token_response(tokens)


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> TokenResponse:
    """
    Authenticate with email and password; returns access and refresh tokens.
    Include the access token in the Authorization header as: Bearer <access_token>
    """
    try:
        tokens = sessions.login(body.email, body.password)
    except AuthError as e:
        raise _unauthorized(e) from e
    return _token_response(tokens)


@router.post("/refresh", response_model=TokenResponse)
def refresh(
    body: RefreshRequest,
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> TokenResponse:
    """Rotate the session: the presented refresh token is consumed."""
    try:
        tokens = sessions.refresh(body.refresh_token)
    except AuthError as e:
        raise _unauthorized(e) from e
    return _token_response(tokens)


@router.post("/logout")
def logout(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> dict:
    """Invalidate the caller's refresh token. Safe to call repeatedly."""
    sessions.logout(current_user.id)
    return {}


@router.get("/me", response_model=UserProfile)
def me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[UserStore, Depends(get_user_store)],
) -> UserProfile:
    """Profile of the authenticated caller."""
    user = store.get_by_id(current_user.id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserProfile.model_validate(user)
