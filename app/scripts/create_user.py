"""
Create an account from the command line (avatar must already be hosted). Run from project root:
  python -m app.scripts.create_user USERNAME EMAIL FULL_NAME PASSWORD --avatar-url URL
Example:
  python -m app.scripts.create_user sam sam@example.com "Sam R" 'p@ss1234' \
      --avatar-url https://media.example.com/avatars/sam.png
"""
import argparse
import sys

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.errors import ConflictError
from app.core.security import PasswordHasher
from app.models import UserAccount
from app.services.accounts import AccountStore, normalize_username


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create a Keystone account without the upload flow.")
    parser.add_argument("username", help="Username (stored lowercase)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("full_name", help="Full name")
    parser.add_argument("password", help="Password (non-blank)")
    parser.add_argument("--avatar-url", required=True, help="URL of an already hosted avatar")
    parser.add_argument("--cover-image-url", default="", help="URL of an already hosted cover image")
    return parser


def create_account(db: Session, args: argparse.Namespace, hasher: PasswordHasher) -> int:
    username = normalize_username(args.username)
    email = args.email.strip()
    full_name = args.full_name.strip()
    if (
        not username
        or not email
        or not full_name
        or not args.password.strip()
        or not args.avatar_url.strip()
    ):
        print("All fields are required.", file=sys.stderr)
        return 1

    store = AccountStore(db)
    if store.find_by_username_or_email(username, email) is not None:
        print(f"User '{username}' or email '{email}' already exists.", file=sys.stderr)
        return 1
    account = UserAccount(
        username=username,
        email=email,
        full_name=full_name,
        avatar_url=args.avatar_url.strip(),
        cover_image_url=args.cover_image_url.strip(),
        password_hash=hasher.hash(args.password),
    )
    try:
        account = store.insert(account)
    except ConflictError:
        print(f"User '{username}' or email '{email}' already exists.", file=sys.stderr)
        return 1
    print(f"Created user '{username}' with id {account.id}.")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    hasher = PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)
    db = SessionLocal()
    try:
        return create_account(db, args, hasher)
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
