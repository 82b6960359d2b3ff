"""Tests for the app.scripts.create_user CLI helpers."""

import unittest
from unittest.mock import MagicMock, patch

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security import PasswordHasher
from app.models import Base
from app.scripts.create_user import build_parser, create_account, main
from app.services.accounts import AccountStore


def _session() -> Session:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False)()


def _args(*argv: str):
    return build_parser().parse_args(list(argv))


class TestCreateAccount(unittest.TestCase):
    def setUp(self) -> None:
        self.session = _session()
        self.hasher = PasswordHasher(rounds=4)

    def tearDown(self) -> None:
        self.session.close()

    def test_creates_hashed_account(self) -> None:
        args = _args("Sam", "sam@x.com", "Sam R", "p@ss1234", "--avatar-url", "https://m/a.png")
        self.assertEqual(create_account(self.session, args, self.hasher), 0)
        account = AccountStore(self.session).find_by_identifier(username="sam")
        self.assertEqual(account.avatar_url, "https://m/a.png")
        self.assertTrue(self.hasher.verify("p@ss1234", account.password_hash))

    def test_duplicate_rejected(self) -> None:
        args = _args("sam", "sam@x.com", "Sam R", "p@ss1234", "--avatar-url", "https://m/a.png")
        create_account(self.session, args, self.hasher)
        self.assertEqual(create_account(self.session, args, self.hasher), 1)
        self.assertEqual(AccountStore(self.session).count(), 1)

    def test_short_password_accepted_like_register(self) -> None:
        args = _args("sam", "sam@x.com", "Sam R", "pw", "--avatar-url", "https://m/a.png")
        self.assertEqual(create_account(self.session, args, self.hasher), 0)
        account = AccountStore(self.session).find_by_identifier(username="sam")
        self.assertTrue(self.hasher.verify("pw", account.password_hash))

    def test_blank_password_rejected(self) -> None:
        args = _args("sam", "sam@x.com", "Sam R", "   ", "--avatar-url", "https://m/a.png")
        self.assertEqual(create_account(self.session, args, self.hasher), 1)
        self.assertEqual(AccountStore(self.session).count(), 0)

    def test_blank_full_name_rejected(self) -> None:
        args = _args("sam", "sam@x.com", "  ", "p@ss1234", "--avatar-url", "https://m/a.png")
        self.assertEqual(create_account(self.session, args, self.hasher), 1)


class TestMain(unittest.TestCase):
    def test_hashes_with_configured_rounds(self) -> None:
        settings = MagicMock()
        settings.BCRYPT_ROUNDS = 6
        with (
            patch("app.scripts.create_user.get_settings", return_value=settings),
            patch("app.scripts.create_user.SessionLocal") as session_local,
            patch("app.scripts.create_user.create_account", return_value=0) as create,
        ):
            code = main(["sam", "sam@x.com", "Sam R", "p@ss1234", "--avatar-url", "https://m/a.png"])
        self.assertEqual(code, 0)
        hasher = create.call_args.args[2]
        self.assertEqual(hasher.rounds, 6)
        session_local.return_value.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
