"""ORM model for user accounts (credentials, profile media and current session)."""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, Text

from app.models.base import Base


def _new_account_id() -> str:
    return uuid4().hex


def _utc_now() -> datetime:
    return datetime.now(UTC)


class UserAccount(Base):
    """
    User account for registration, login and token sessions.

    password_hash is a bcrypt digest and is only written on creation or an
    explicit password change. refresh_token holds the refresh token of the
    current session; NULL means logged out.
    """

    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=_new_account_id)
    username = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(320), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=False, index=True)
    avatar_url = Column(String(2048), nullable=False)
    cover_image_url = Column(String(2048), nullable=False, default="")
    password_hash = Column(String(255), nullable=False)
    refresh_token = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utc_now)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utc_now,
        onupdate=_utc_now,
    )

    def __repr__(self) -> str:
        return f"<UserAccount id={self.id!r} username={self.username!r}>"
