"""Tests for app.core.config.Settings validation."""

import unittest

from pydantic import SecretStr, ValidationError

from app.core.config import Settings


def _settings(**kwargs: object) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestDefaults(unittest.TestCase):
    def test_default_token_lifetimes_and_cost(self) -> None:
        s = _settings()
        self.assertEqual(s.BCRYPT_ROUNDS, 10)
        self.assertEqual(s.ACCESS_TOKEN_EXPIRE_MINUTES, 60)
        self.assertEqual(s.REFRESH_TOKEN_EXPIRE_DAYS, 10)
        self.assertTrue(s.REFRESH_TOKEN_CROSS_CHECK)
        self.assertTrue(s.COOKIE_SECURE)
        self.assertIsNone(s.MEDIA_UPLOAD_URL)


class TestDatabaseUrl(unittest.TestCase):
    def test_sqlite_accepted(self) -> None:
        self.assertEqual(_settings(DATABASE_URL=" sqlite:// ").DATABASE_URL, "sqlite://")

    def test_other_scheme_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(DATABASE_URL="mysql://u:p@localhost/db")


class TestTokenSecrets(unittest.TestCase):
    def test_identical_secrets_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(ACCESS_TOKEN_SECRET=SecretStr("same"), REFRESH_TOKEN_SECRET=SecretStr("same"))

    def test_blank_secret_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(ACCESS_TOKEN_SECRET=SecretStr("   "))

    def test_non_hmac_algorithm_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_ALGORITHM="RS256")


class TestBounds(unittest.TestCase):
    def test_bcrypt_rounds_bounds(self) -> None:
        for rounds in (3, 32):
            with self.subTest(rounds=rounds):
                with self.assertRaises(ValidationError):
                    _settings(BCRYPT_ROUNDS=rounds)

    def test_expiry_bounds(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(ACCESS_TOKEN_EXPIRE_MINUTES=0)
        with self.assertRaises(ValidationError):
            _settings(REFRESH_TOKEN_EXPIRE_DAYS=91)

    def test_media_url_scheme(self) -> None:
        self.assertIsNone(_settings(MEDIA_UPLOAD_URL="  ").MEDIA_UPLOAD_URL)
        with self.assertRaises(ValidationError):
            _settings(MEDIA_UPLOAD_URL="ftp://media.example.com")


if __name__ == "__main__":
    unittest.main()
