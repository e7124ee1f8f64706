"""FastAPI dependencies: service wiring, access guard and authorization guard."""

import logging
from collections.abc import Callable
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.rbac import RoutePolicy, is_authorized
from app.core.security import PasswordHasher
from app.core.tokens import ACCESS_TOKEN, InvalidToken, TokenIssuer
from app.schemas.auth import CurrentUser
from app.services.auth import SessionManager
from app.services.user_store import UserStore

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@lru_cache
def get_token_issuer() -> TokenIssuer:
    """Process-wide issuer built once from settings."""
    return TokenIssuer(get_settings())


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)


def get_user_store(db: Annotated[Session, Depends(get_db)]) -> UserStore:
    return UserStore(db)


def get_session_manager(
    store: Annotated[UserStore, Depends(get_user_store)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> SessionManager:
    return SessionManager(store, hasher, issuer)


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> CurrentUser:
    """
    Access guard: require a valid Bearer access token and return its identity.

    Trusts signature and expiry only; the database is not consulted, so a
    revoked session's access token stays usable until it expires.
    """
    if credentials is None:
        raise _unauthenticated("Not authenticated")
    try:
        claims = issuer.verify(credentials.credentials, ACCESS_TOKEN)
        return CurrentUser(id=claims.sub, email=claims.email, role=claims.role)
    except (InvalidToken, ValidationError):
        raise _unauthenticated("Invalid or expired token")


def require(policy: RoutePolicy) -> Callable[..., CurrentUser]:
    """
    Authorization guard for one route policy; use as Depends(require(POLICY)).

    Permissions are read from the credential store only when the policy
    declares any. Denials share one generic 403 regardless of which check failed.
    """

    def guard(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
        store: Annotated[UserStore, Depends(get_user_store)],
    ) -> CurrentUser:
        permissions: frozenset[str] = frozenset()
        if policy.required_permissions:
            held = store.get_permissions(current_user.id)
            if held is None:
                logger.warning("Authorization denied: user id=%s no longer exists", current_user.id)
                raise _forbidden()
            permissions = held
        if not is_authorized(policy, current_user.role.value, permissions):
            logger.warning("Authorization denied for user id=%s", current_user.id)
            raise _forbidden()
        return current_user

    return guard


def _forbidden() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Insufficient permissions",
    )
