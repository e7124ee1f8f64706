"""
Create a user directly in the store (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user EMAIL PASSWORD NAME [role]
Example:
  python -m app.scripts.create_user admin@example.com your-secure-password "Site Admin" ADMIN
Admins are granted every known permission.
"""
import argparse
import sys

from pydantic import ValidationError

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.rbac import KNOWN_PERMISSIONS, UserRole
from app.core.security import PasswordHasher
from app.schemas.auth import RegisterRequest
from app.services.errors import DuplicateEmail
from app.services.user_store import UserStore


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a warehouse user without the API.")
    parser.add_argument("email", help="Login email")
    parser.add_argument("password", help="Password (6-128 chars)")
    parser.add_argument("name", help="Display name")
    parser.add_argument(
        "role",
        nargs="?",
        default=UserRole.VIEWER.value,
        choices=[r.value for r in UserRole],
    )
    args = parser.parse_args(argv)

    try:
        draft = RegisterRequest(name=args.name, email=args.email, password=args.password)
    except ValidationError as e:
        for err in e.errors():
            print(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}", file=sys.stderr)
        return 1

    role = UserRole(args.role)
    permissions = sorted(KNOWN_PERMISSIONS) if role is UserRole.ADMIN else []
    hasher = PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)

    db = SessionLocal()
    try:
        store = UserStore(db)
        store.create(
            email=draft.email,
            name=draft.name,
            password_hash=hasher.hash(draft.password),
            role=role,
            permissions=permissions,
        )
    except DuplicateEmail:
        print(f"User '{draft.email}' already exists.", file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{draft.email}' with role '{role.value}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
