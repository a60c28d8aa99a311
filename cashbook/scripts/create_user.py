"""
Create a user (e.g. the first admin). Run from project root:
  python -m cashbook.scripts.create_user EMAIL NAME [role]
Example:
  python -m cashbook.scripts.create_user ana@example.com "Ana Pérez" ADMIN
"""
import argparse
import sys

from cashbook.core.database import SessionLocal
from cashbook.models.user import ROLE_ADMIN, ROLE_USER, User, normalize_email


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a Cashbook user (no OAuth sign-in needed).")
    parser.add_argument("email", help="Email (unique, case-insensitive)")
    parser.add_argument("name", help="Display name (at least 2 chars)")
    parser.add_argument("role", nargs="?", default=ROLE_USER, choices=[ROLE_USER, ROLE_ADMIN])
    args = parser.parse_args()

    email = normalize_email(args.email)
    if "@" not in email or len(email) > 320:
        print("Invalid email.", file=sys.stderr)
        return 1
    name = args.name.strip()
    if len(name) < 2 or len(name) > 255:
        print("Name must be 2-255 characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.email == email).first()
        if existing:
            print(f"User '{email}' already exists.", file=sys.stderr)
            return 1
        user = User(email=email, name=name, role=args.role, email_verified=False)
        db.add(user)
        db.commit()
        print(f"Created user '{email}' with role '{args.role}' (id {user.id}).")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
