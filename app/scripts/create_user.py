"""
Create a user (e.g. the first super administrator). Run from project root:
  python -m app.scripts.create_user EMAIL PASSWORD [ROLE] [--first-name NAME] [--last-name NAME]
Example:
  python -m app.scripts.create_user admin@example.com your-secure-password SUPERADMIN_ROLE
ROLE accepts a wire value (ADMIN_ROLE), enum name (admin), display name or rank (9).
"""
import argparse
import sys

from app.core.database import SessionLocal
from app.core.roles import Role, resolve_role
from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, hash_password
from app.core.validation import is_valid_email
from app.models.user import User
from app.repositories.users import UserRepository


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a user without going through registration.")
    parser.add_argument("email", help="Email address (unique)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("role", nargs="?", default=Role.SUPERADMIN.value, help="Role (default SUPERADMIN_ROLE)")
    parser.add_argument("--first-name", default="Admin")
    parser.add_argument("--last-name", default="Principal")
    args = parser.parse_args()

    email = args.email.strip().lower()
    if not is_valid_email(email):
        print("Invalid email format.", file=sys.stderr)
        return 1
    if len(args.password) < PASSWORD_MIN_LEN or len(args.password) > PASSWORD_MAX_LEN:
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1
    role = resolve_role(args.role)
    if role is None:
        print(f"Unknown role '{args.role}'.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        repo = UserRepository(db)
        if repo.email_exists(email):
            print(f"User '{email}' already exists.", file=sys.stderr)
            return 1
        user = User(
            first_name=args.first_name.strip() or None,
            last_name=args.last_name.strip() or None,
            email=email,
            password_hash=hash_password(args.password),
            role=role.value,
        )
        db.add(user)
        db.commit()
        print(f"Created user '{email}' with role '{role.value}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
