"""Auth dependencies: session coordinator wiring and request authentication (get_current_user)."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.errors import InvalidTokenError
from app.core.security import PasswordHasher, TokenIssuer, get_token_issuer
from app.schemas.auth import CurrentUser
from app.services.accounts import AccountStore
from app.services.cookies import ACCESS_COOKIE
from app.services.media import MediaUploader
from app.services.sessions import SessionCoordinator, SessionPolicy

security = HTTPBearer(auto_error=False)


def get_session_coordinator(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> SessionCoordinator:
    """Dependency: a coordinator bound to this request's DB session."""
    return SessionCoordinator(
        store=AccountStore(db),
        hasher=PasswordHasher(rounds=settings.BCRYPT_ROUNDS),
        issuer=issuer,
        media=MediaUploader.from_settings(settings),
        policy=SessionPolicy.from_settings(settings),
    )


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> CurrentUser:
    """
    Dependency: resolve the caller from an access token and return the account.

    The token is read from the Authorization Bearer header, falling back to the
    accessToken cookie. Raises InvalidTokenError (401) if missing or invalid.
    """
    token = credentials.credentials if credentials else request.cookies.get(ACCESS_COOKIE)
    if not token:
        raise InvalidTokenError("Unauthorized request")
    payload = issuer.verify_access_token(token)
    account = AccountStore(db).get(str(payload["id"]))
    if account is None:
        raise InvalidTokenError("Invalid access token")
    return CurrentUser.model_validate(account)
