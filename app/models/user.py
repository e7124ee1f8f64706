"""ORM model for application users (credentials, RBAC and session state)."""

import uuid

from sqlalchemy import JSON, Column, DateTime, String, func
from sqlalchemy.dialects.postgresql import JSONB

from app.core.rbac import UserRole
from app.models.base import Base


def _new_user_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role: one of UserRole (ADMIN, WAREHOUSE_WORKER, VIEWER)
    permissions: list of capability strings, checked in addition to role
    refresh_token_hash: hash of the single valid refresh token; NULL when logged out
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_user_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=UserRole.VIEWER.value)
    permissions = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=list)
    refresh_token_hash = Column(String(255), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
