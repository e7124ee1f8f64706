"""Credential store: repository for User records over a SQLAlchemy session."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.rbac import UserRole
from app.models.user import User
from app.services.errors import DuplicateEmail

logger = logging.getLogger(__name__)


class UserStore:
    """
    Route and service code never query the users table directly; they go
    through this store. Every write commits immediately (one record per write,
    relying on single-row atomicity in the database).
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, user_id: str) -> User | None:
        return self.session.get(User, user_id)

    def get_by_email(self, email: str) -> User | None:
        """Look up by normalized (lower-case) email."""
        return self.session.query(User).filter(User.email == email.strip().lower()).first()

    def list_users(self) -> list[User]:
        return self.session.query(User).order_by(User.created_at, User.email).all()

    def create(
        self,
        *,
        email: str,
        name: str,
        password_hash: str,
        role: UserRole = UserRole.VIEWER,
        permissions: list[str] | None = None,
    ) -> User:
        """Insert a new user. Raises DuplicateEmail if the email is taken."""
        email = email.strip().lower()
        if self.get_by_email(email) is not None:
            raise DuplicateEmail()
        user = User(
            email=email,
            name=name,
            password_hash=password_hash,
            role=role.value,
            permissions=list(permissions or []),
        )
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent insert of the same email.
            self.session.rollback()
            raise DuplicateEmail() from e
        self.session.refresh(user)
        logger.info("Created user id=%s role=%s", user.id, user.role)
        return user

    def set_refresh_token_hash(self, user_id: str, token_hash: str | None) -> bool:
        """Overwrite (or clear) the stored refresh-token hash. Returns False if no such user."""
        updated = (
            self.session.query(User)
            .filter(User.id == user_id)
            .update({User.refresh_token_hash: token_hash}, synchronize_session="fetch")
        )
        self.session.commit()
        return updated > 0

    def get_permissions(self, user_id: str) -> frozenset[str] | None:
        """Current permission set, or None if the user no longer exists."""
        user = self.get_by_id(user_id)
        if user is None:
            return None
        return frozenset(user.permissions or [])

    def update_user(
        self,
        user_id: str,
        *,
        name: str | None = None,
        role: UserRole | None = None,
        permissions: list[str] | None = None,
    ) -> User | None:
        """Apply the given changes; None arguments are left as they are."""
        user = self.get_by_id(user_id)
        if user is None:
            return None
        if name is not None:
            user.name = name
        if role is not None:
            user.role = role.value
        if permissions is not None:
            user.permissions = list(permissions)
        self.session.commit()
        self.session.refresh(user)
        return user

    def delete_user(self, user_id: str) -> bool:
        user = self.get_by_id(user_id)
        if user is None:
            return False
        self.session.delete(user)
        self.session.commit()
        logger.info("Deleted user id=%s", user_id)
        return True
