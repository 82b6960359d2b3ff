"""Request/response schemas for account and session endpoints.

JSON field names are camelCase on the wire (fullName, accessToken, ...); the
Python attributes stay snake_case.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing with camelCase aliases and accepting either form."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterFields(CamelModel):
    """Identity fields submitted at registration. Blank checks happen in the service."""

    full_name: str | None = None
    email: str | None = None
    username: str | None = None
    password: str | None = Field(default=None, repr=False)


class AccountPublic(CamelModel):
    """Account as returned to clients: no password hash, no refresh token."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: str
    username: str
    email: str
    full_name: str
    avatar_url: str
    cover_image_url: str = ""
    created_at: datetime
    updated_at: datetime


class LoginRequest(CamelModel):
    """Credentials for login: username or email, plus password."""

    username: str | None = Field(default=None, max_length=255, description="Username")
    email: str | None = Field(default=None, max_length=320, description="Email")
    password: str | None = Field(default=None, max_length=128, repr=False)


class TokenPair(CamelModel):
    """Access and refresh token issued together."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")


class LoginResult(TokenPair):
    """Payload returned after a successful login."""

    user: AccountPublic


class RefreshRequest(CamelModel):
    """Refresh token in the body, for clients that do not send cookies."""

    refresh_token: str | None = None


class ChangePasswordRequest(CamelModel):
    old_password: str = Field(..., repr=False)
    new_password: str = Field(..., max_length=128, repr=False)


class CurrentUser(CamelModel):
    """Authenticated account (from a verified access token) for dependency injection."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: str
    username: str
    email: str
    full_name: str
