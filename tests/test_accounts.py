"""Tests for app.services.accounts.AccountStore against an in-memory SQLite database."""

import time
import unittest

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.errors import ConflictError
from app.models import Base, UserAccount
from app.services.accounts import AccountStore, normalize_username


def _session() -> Session:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False)()


def _account(username: str = "sam", email: str = "sam@x.com") -> UserAccount:
    return UserAccount(
        username=username,
        email=email,
        full_name="Sam R",
        avatar_url="https://media.test/sam.png",
        password_hash="$2b$04$notarealhashbutnotraw",
    )


class TestNormalizeUsername(unittest.TestCase):
    def test_trims_and_lowercases(self) -> None:
        self.assertEqual(normalize_username("  SamR "), "samr")


class TestInsert(unittest.TestCase):
    """insert() assigns id and timestamps; unique indexes turn duplicates into ConflictError."""

    def setUp(self) -> None:
        self.session = _session()
        self.store = AccountStore(self.session)

    def tearDown(self) -> None:
        self.session.close()

    def test_insert_assigns_id_and_timestamps(self) -> None:
        account = self.store.insert(_account())
        self.assertTrue(account.id)
        self.assertIsNotNone(account.created_at)
        self.assertIsNotNone(account.updated_at)
        self.assertEqual(account.cover_image_url, "")
        self.assertIsNone(account.refresh_token)

    def test_ids_are_unique(self) -> None:
        first = self.store.insert(_account("a", "a@x.com"))
        second = self.store.insert(_account("b", "b@x.com"))
        self.assertNotEqual(first.id, second.id)

    def test_duplicate_username_raises_conflict(self) -> None:
        self.store.insert(_account("sam", "sam@x.com"))
        with self.assertRaises(ConflictError):
            self.store.insert(_account("sam", "other@x.com"))
        self.assertEqual(self.store.count(), 1)

    def test_duplicate_email_raises_conflict(self) -> None:
        self.store.insert(_account("sam", "sam@x.com"))
        with self.assertRaises(ConflictError):
            self.store.insert(_account("other", "sam@x.com"))
        self.assertEqual(self.store.count(), 1)

    def test_store_usable_after_conflict(self) -> None:
        self.store.insert(_account("sam", "sam@x.com"))
        with self.assertRaises(ConflictError):
            self.store.insert(_account("sam", "sam@x.com"))
        self.store.insert(_account("kim", "kim@x.com"))
        self.assertEqual(self.store.count(), 2)


class TestLookups(unittest.TestCase):
    def setUp(self) -> None:
        self.session = _session()
        self.store = AccountStore(self.session)
        self.sam = self.store.insert(_account("sam", "sam@x.com"))
        self.kim = self.store.insert(_account("kim", "kim@x.com"))

    def tearDown(self) -> None:
        self.session.close()

    def test_get_by_id(self) -> None:
        self.assertEqual(self.store.get(self.sam.id).username, "sam")
        self.assertIsNone(self.store.get("missing"))

    def test_find_by_username_or_email(self) -> None:
        self.assertEqual(self.store.find_by_username_or_email("sam", "nobody@x.com").id, self.sam.id)
        self.assertEqual(self.store.find_by_username_or_email("nobody", "kim@x.com").id, self.kim.id)
        self.assertIsNone(self.store.find_by_username_or_email("nobody", "nobody@x.com"))

    def test_find_by_identifier_username_only(self) -> None:
        self.assertEqual(self.store.find_by_identifier(username=" SAM ").id, self.sam.id)

    def test_find_by_identifier_email_only(self) -> None:
        self.assertEqual(self.store.find_by_identifier(email="kim@x.com").id, self.kim.id)

    def test_find_by_identifier_both_must_agree(self) -> None:
        self.assertEqual(
            self.store.find_by_identifier(username="sam", email="sam@x.com").id, self.sam.id
        )
        self.assertIsNone(self.store.find_by_identifier(username="sam", email="kim@x.com"))

    def test_find_by_identifier_without_identifiers(self) -> None:
        self.assertIsNone(self.store.find_by_identifier())


class TestTargetedUpdates(unittest.TestCase):
    """set_refresh_token() writes only the token; update_password_hash() also ends the session."""

    def setUp(self) -> None:
        self.session = _session()
        self.store = AccountStore(self.session)
        self.account = self.store.insert(_account())

    def tearDown(self) -> None:
        self.session.close()

    def test_set_refresh_token_leaves_password_hash(self) -> None:
        before = self.account.password_hash
        self.assertTrue(self.store.set_refresh_token(self.account.id, "token-1"))
        reloaded = self.store.get(self.account.id)
        self.assertEqual(reloaded.refresh_token, "token-1")
        self.assertEqual(reloaded.password_hash, before)

    def test_set_refresh_token_bumps_updated_at(self) -> None:
        before = self.store.get(self.account.id).updated_at
        time.sleep(0.01)
        self.store.set_refresh_token(self.account.id, "token-1")
        self.assertGreater(self.store.get(self.account.id).updated_at, before)

    def test_clear_refresh_token(self) -> None:
        self.store.set_refresh_token(self.account.id, "token-1")
        self.store.set_refresh_token(self.account.id, None)
        self.assertIsNone(self.store.get(self.account.id).refresh_token)

    def test_set_refresh_token_unknown_account(self) -> None:
        self.assertFalse(self.store.set_refresh_token("missing", "token-1"))

    def test_update_password_hash_clears_refresh_token(self) -> None:
        self.store.set_refresh_token(self.account.id, "token-1")
        self.assertTrue(self.store.update_password_hash(self.account.id, "$2b$04$new"))
        reloaded = self.store.get(self.account.id)
        self.assertEqual(reloaded.password_hash, "$2b$04$new")
        self.assertIsNone(reloaded.refresh_token)

    def test_with_refresh_token(self) -> None:
        other = self.store.insert(_account("kim", "kim@x.com"))
        self.store.set_refresh_token(other.id, "token-2")
        self.assertEqual([a.id for a in self.store.with_refresh_token()], [other.id])


if __name__ == "__main__":
    unittest.main()
