"""Session sweep: clear stored refresh tokens that no longer verify."""

import logging

from sqlalchemy.orm import Session

from app.core.errors import InvalidTokenError
from app.core.security import TokenIssuer
from app.services.accounts import AccountStore

logger = logging.getLogger(__name__)


def run_session_sweep(session: Session, issuer: TokenIssuer) -> int:
    """
    Clear refresh tokens that are expired, badly signed or issued for another account.

    Returns the number of sessions cleared. Idempotent: safe to run repeatedly.
    """
    store = AccountStore(session)
    cleared = 0
    for account in store.with_refresh_token():
        try:
            claims = issuer.verify_refresh_token(account.refresh_token)
        except InvalidTokenError:
            claims = None
        if claims is not None and str(claims["id"]) == account.id:
            continue
        if store.set_refresh_token(account.id, None):
            cleared += 1

    if cleared > 0:
        logger.info("Session sweep: sessions_cleared=%s", cleared)
    return cleared
