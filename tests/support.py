"""Shared helpers: in-memory credential store, cheap hasher and test settings."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.core.rbac import UserRole
from app.core.security import PasswordHasher
from app.models import Base, User
from app.services.user_store import UserStore

TEST_SECRET = "test-secret-key-with-enough-length-123"


def make_settings(**overrides: object) -> Settings:
    values: dict = {
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": TEST_SECRET,
        "BCRYPT_ROUNDS": 4,
    }
    values.update(overrides)
    return Settings(**values)


def make_session_factory() -> sessionmaker:
    """One in-memory SQLite database shared by every session from the factory."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


def make_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


def seed_user(
    session_factory: sessionmaker,
    hasher: PasswordHasher,
    email: str,
    password: str,
    role: UserRole = UserRole.VIEWER,
    permissions: list[str] | None = None,
    name: str = "Test User",
) -> str:
    """Insert a user and return its id."""
    db = session_factory()
    try:
        user: User = UserStore(db).create(
            email=email,
            name=name,
            password_hash=hasher.hash(password),
            role=role,
            permissions=permissions,
        )
        return user.id
    finally:
        db.close()
