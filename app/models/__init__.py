"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.user import UserAccount

__all__ = ["Base", "UserAccount"]
