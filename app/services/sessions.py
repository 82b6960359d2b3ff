"""
Session coordinator: registration, login, logout, token refresh and password change.

Every operation either completes or raises one AccountError subclass. Failures of
hashing, signing or persistence are logged here and surfaced as InternalError.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from os import PathLike
from typing import TYPE_CHECKING

from app.core.errors import (
    AuthenticationError,
    ConflictError,
    InternalError,
    InvalidTokenError,
    NotFoundError,
    ValidationError,
)
from app.core.security import AccessClaims, PasswordHasher, RefreshClaims, TokenIssuer
from app.models import UserAccount
from app.schemas.auth import AccountPublic, LoginResult, RegisterFields, TokenPair
from app.services.accounts import AccountStore, normalize_username
from app.services.media import MediaUploader

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

LocalPath = str | PathLike[str]


@dataclass(frozen=True)
class SessionPolicy:
    """Revocation and error-reporting choices for login and refresh."""

    # Refresh tokens must match the one stored on the account.
    cross_check_refresh_token: bool = True
    # Unknown accounts fail login like a wrong password.
    uniform_login_errors: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> SessionPolicy:
        return cls(
            cross_check_refresh_token=settings.REFRESH_TOKEN_CROSS_CHECK,
            uniform_login_errors=settings.LOGIN_UNIFORM_ERRORS,
        )


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


class SessionCoordinator:
    def __init__(
        self,
        store: AccountStore,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
        media: MediaUploader,
        policy: SessionPolicy | None = None,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.issuer = issuer
        self.media = media
        self.policy = policy or SessionPolicy()

    async def register(
        self,
        fields: RegisterFields,
        avatar_path: LocalPath | None,
        cover_image_path: LocalPath | None = None,
    ) -> AccountPublic:
        """
        Create an account from identity fields and uploaded profile media.

        Raises ValidationError for blank fields or a missing/failed avatar,
        ConflictError if the username or email is taken.
        """
        if any(
            _is_blank(v)
            for v in (fields.full_name, fields.email, fields.username, fields.password)
        ):
            raise ValidationError("All fields are required")

        username = normalize_username(fields.username)
        email = fields.email.strip()
        full_name = fields.full_name.strip()

        existing = await asyncio.to_thread(self.store.find_by_username_or_email, username, email)
        if existing is not None:
            raise ConflictError()

        if not avatar_path:
            raise ValidationError("Avatar file is required")

        avatar = await self.media.upload(avatar_path)
        cover_image = await self.media.upload(cover_image_path)
        if avatar is None:
            raise ValidationError("Avatar file is required")

        try:
            password_hash = await asyncio.to_thread(self.hasher.hash, fields.password)
        except Exception as exc:
            logger.exception("Password hashing failed during registration")
            raise InternalError("Something went wrong while registering the user") from exc

        account = UserAccount(
            username=username,
            email=email,
            full_name=full_name,
            avatar_url=avatar.url,
            cover_image_url=cover_image.url if cover_image else "",
            password_hash=password_hash,
        )
        try:
            account = await asyncio.to_thread(self.store.insert, account)
        except ConflictError:
            raise
        except Exception as exc:
            logger.exception("Persisting new account failed")
            raise InternalError("Something went wrong while registering the user") from exc

        logger.info("Account registered", extra={"account_id": account.id})
        return AccountPublic.model_validate(account)

    def _issue_tokens(self, account: UserAccount) -> TokenPair:
        """Sign both tokens for the account and store the refresh token on it."""
        try:
            access_token = self.issuer.issue_access_token(
                AccessClaims(
                    id=account.id,
                    email=account.email,
                    username=account.username,
                    full_name=account.full_name,
                )
            )
            refresh_token = self.issuer.issue_refresh_token(RefreshClaims(id=account.id))
            if not self.store.set_refresh_token(account.id, refresh_token):
                raise RuntimeError(f"account {account.id} vanished while storing refresh token")
        except Exception as exc:
            logger.exception("Token generation failed", extra={"account_id": account.id})
            raise InternalError("Something went wrong while generating tokens") from exc
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def login(
        self,
        username: str | None,
        email: str | None,
        password: str | None,
    ) -> LoginResult:
        """
        Verify credentials and start a session.

        Either username or email identifies the account; if both are given
        they must belong to the same account.
        """
        if _is_blank(username) and _is_blank(email):
            raise ValidationError("Username or email is required")
        if not password:
            raise ValidationError("Password is required")

        account = self.store.find_by_identifier(
            username=None if _is_blank(username) else username,
            email=None if _is_blank(email) else email,
        )
        if account is None:
            logger.info("Login failed: unknown account")
            if self.policy.uniform_login_errors:
                raise AuthenticationError()
            raise NotFoundError()

        if not self.hasher.verify(password, account.password_hash):
            logger.info("Login failed: wrong password", extra={"account_id": account.id})
            raise AuthenticationError()

        tokens = self._issue_tokens(account)
        logger.info("Login succeeded", extra={"account_id": account.id})
        return LoginResult(
            user=AccountPublic.model_validate(account),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )

    def logout(self, account_id: str) -> None:
        """Clear the stored refresh token. Safe to call when already logged out."""
        try:
            self.store.set_refresh_token(account_id, None)
        except Exception as exc:
            logger.exception("Clearing refresh token failed", extra={"account_id": account_id})
            raise InternalError() from exc
        logger.info("Logout", extra={"account_id": account_id})

    def refresh(self, refresh_token: str | None) -> TokenPair:
        """
        Exchange a refresh token for a new access token and a rotated refresh token.

        With the cross-check policy on, only the refresh token currently stored
        on the account is accepted, so tokens from before a logout or an earlier
        rotation are rejected even while their signature is still valid.
        """
        if not refresh_token:
            raise InvalidTokenError("Refresh token is required")
        claims = self.issuer.verify_refresh_token(refresh_token)
        account = self.store.get(str(claims["id"]))
        if account is None:
            raise InvalidTokenError("Invalid refresh token")
        if (
            self.policy.cross_check_refresh_token
            and account.refresh_token != refresh_token
        ):
            logger.info(
                "Refresh rejected: token does not match stored session",
                extra={"account_id": account.id},
            )
            raise InvalidTokenError("Refresh token is expired or used")
        return self._issue_tokens(account)

    def change_password(
        self,
        account_id: str,
        old_password: str,
        new_password: str,
    ) -> None:
        """Verify the old password, store a freshly salted hash of the new one and end the session."""
        account = self.store.get(account_id)
        if account is None:
            raise NotFoundError()
        if _is_blank(new_password):
            raise ValidationError("New password is required")
        if not self.hasher.verify(old_password, account.password_hash):
            raise AuthenticationError("Invalid old password")
        try:
            password_hash = self.hasher.hash(new_password)
            self.store.update_password_hash(account_id, password_hash)
        except Exception as exc:
            logger.exception("Password change failed", extra={"account_id": account_id})
            raise InternalError() from exc
        logger.info("Password changed", extra={"account_id": account_id})

    def current_account(self, account_id: str) -> AccountPublic:
        account = self.store.get(account_id)
        if account is None:
            raise NotFoundError()
        return AccountPublic.model_validate(account)
