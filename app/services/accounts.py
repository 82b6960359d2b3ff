"""Credential store: persistence of user accounts on a SQLAlchemy session."""

import logging

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError
from app.models import UserAccount

logger = logging.getLogger(__name__)


def normalize_username(username: str) -> str:
    return username.strip().lower()


class AccountStore:
    """
    Reads and writes UserAccount rows.

    Writes commit immediately and roll back on failure; an IntegrityError on
    insert means a username or email unique index rejected the row.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, account_id: str) -> UserAccount | None:
        return self.session.get(UserAccount, account_id)

    def find_by_username_or_email(self, username: str, email: str) -> UserAccount | None:
        """Return any account whose username or email matches (registration conflict check)."""
        stmt = select(UserAccount).where(
            or_(UserAccount.username == username, UserAccount.email == email)
        )
        return self.session.scalars(stmt).first()

    def find_by_identifier(
        self,
        username: str | None = None,
        email: str | None = None,
    ) -> UserAccount | None:
        """
        Find the account identified by username and/or email.

        When both are given they must belong to the same account.
        """
        conditions = []
        if username:
            conditions.append(UserAccount.username == normalize_username(username))
        if email:
            conditions.append(UserAccount.email == email.strip())
        if not conditions:
            return None
        stmt = select(UserAccount).where(and_(*conditions))
        return self.session.scalars(stmt).first()

    def count(self) -> int:
        return self.session.scalar(select(func.count()).select_from(UserAccount)) or 0

    def insert(self, account: UserAccount) -> UserAccount:
        """Insert a new account. Raises ConflictError if username or email is taken."""
        self.session.add(account)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.info(
                "Account insert rejected by unique constraint",
                extra={"username": account.username},
            )
            raise ConflictError() from exc
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(account)
        return account

    def set_refresh_token(self, account_id: str, refresh_token: str | None) -> bool:
        """
        Write only refresh_token (and updated_at) for one account.

        Issued as a direct UPDATE so no other column, password_hash included,
        is touched. Returns False if no account matched.
        """
        stmt = (
            update(UserAccount)
            .where(UserAccount.id == account_id)
            .values(refresh_token=refresh_token)
            .execution_options(synchronize_session="fetch")
        )
        try:
            result = self.session.execute(stmt)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return result.rowcount > 0

    def update_password_hash(self, account_id: str, password_hash: str) -> bool:
        """Replace the stored hash and end the current session in the same write."""
        stmt = (
            update(UserAccount)
            .where(UserAccount.id == account_id)
            .values(password_hash=password_hash, refresh_token=None)
            .execution_options(synchronize_session="fetch")
        )
        try:
            result = self.session.execute(stmt)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return result.rowcount > 0

    def with_refresh_token(self) -> list[UserAccount]:
        """Accounts that currently hold a stored refresh token."""
        stmt = select(UserAccount).where(UserAccount.refresh_token.is_not(None))
        return list(self.session.scalars(stmt))
