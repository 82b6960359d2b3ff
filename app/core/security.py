"""Password hashing and JWT access/refresh token issuance and verification."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any, Literal
from uuid import uuid4

import bcrypt
import jwt

from app.core.config import Settings, get_settings
from app.core.errors import InvalidTokenError

# Bcrypt cost (rounds); 10 unless BCRYPT_ROUNDS overrides it.
DEFAULT_BCRYPT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes of the password.
BCRYPT_MAX_BYTES = 72

TokenType = Literal["access", "refresh"]


class PasswordHasher:
    """One-way bcrypt hash and verify; the digest embeds salt and work factor."""

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        self.rounds = rounds

    def hash(self, plain_password: str) -> str:
        """Hash a plain-text password with a fresh salt. Do not store plain passwords."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain_password: str, hashed: str) -> bool:
        """Verify a plain password against a stored hash. Mismatch returns False."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False


@dataclass(frozen=True)
class TokenSettings:
    """Signing parameters for both token types, built once at startup."""

    access_secret: str
    access_ttl: timedelta
    refresh_secret: str
    refresh_ttl: timedelta
    algorithm: str = "HS256"

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenSettings":
        return cls(
            access_secret=settings.ACCESS_TOKEN_SECRET.get_secret_value(),
            access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_secret=settings.REFRESH_TOKEN_SECRET.get_secret_value(),
            refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
            algorithm=settings.JWT_ALGORITHM,
        )


@dataclass(frozen=True)
class AccessClaims:
    """Identity carried by an access token (enough for stateless authorization)."""

    id: str
    email: str
    username: str
    full_name: str


@dataclass(frozen=True)
class RefreshClaims:
    """A refresh token only needs the account id."""

    id: str


def _utc_now() -> datetime:
    return datetime.now(UTC)


class TokenIssuer:
    """
    Issues and verifies signed, time-bounded access and refresh tokens.

    Each token type has its own secret and lifetime. Issued tokens are not
    tracked here; revocation is done by comparing against the refresh token
    stored on the account.
    """

    def __init__(
        self,
        config: TokenSettings,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.config = config
        self._clock = clock

    def _sign(
        self,
        claims: dict[str, Any],
        token_type: TokenType,
        secret: str,
        ttl: timedelta,
    ) -> str:
        now = self._clock()
        payload: dict[str, Any] = {
            **claims,
            "type": token_type,
            "iat": now,
            "exp": now + ttl,
            "jti": uuid4().hex,
        }
        return jwt.encode(payload, secret, algorithm=self.config.algorithm)

    def issue_access_token(self, claims: AccessClaims) -> str:
        return self._sign(
            {
                "id": claims.id,
                "email": claims.email,
                "username": claims.username,
                "fullName": claims.full_name,
            },
            "access",
            self.config.access_secret,
            self.config.access_ttl,
        )

    def issue_refresh_token(self, claims: RefreshClaims) -> str:
        return self._sign(
            {"id": claims.id},
            "refresh",
            self.config.refresh_secret,
            self.config.refresh_ttl,
        )

    def verify(self, token: str, secret: str) -> dict[str, Any]:
        """
        Decode and validate a token signed with secret; return its claims.
        Raises InvalidTokenError on bad signature, expiry or missing claims.
        """
        if not token:
            raise InvalidTokenError("Token is missing")
        try:
            return jwt.decode(
                token,
                secret,
                algorithms=[self.config.algorithm],
                options={"require": ["id", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("Token has expired") from exc
        except jwt.PyJWTError as exc:
            raise InvalidTokenError() from exc

    def _verify_typed(self, token: str, secret: str, token_type: TokenType) -> dict[str, Any]:
        claims = self.verify(token, secret)
        if claims.get("type") != token_type:
            raise InvalidTokenError(f"Not a valid {token_type} token")
        return claims

    def verify_access_token(self, token: str) -> dict[str, Any]:
        return self._verify_typed(token, self.config.access_secret, "access")

    def verify_refresh_token(self, token: str) -> dict[str, Any]:
        return self._verify_typed(token, self.config.refresh_secret, "refresh")


@lru_cache
def get_token_issuer() -> TokenIssuer:
    """Process-wide issuer configured from settings at first use."""
    return TokenIssuer(TokenSettings.from_settings(get_settings()))
