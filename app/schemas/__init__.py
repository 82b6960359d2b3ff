"""Pydantic request/response schemas."""

from app.schemas.auth import (
    AccountPublic,
    ChangePasswordRequest,
    CurrentUser,
    LoginRequest,
    LoginResult,
    RefreshRequest,
    RegisterFields,
    TokenPair,
)
from app.schemas.health import HealthResponse
from app.schemas.response import ApiResponse, EmptyData, error_payload

__all__ = [
    "AccountPublic",
    "ApiResponse",
    "ChangePasswordRequest",
    "CurrentUser",
    "EmptyData",
    "HealthResponse",
    "LoginRequest",
    "LoginResult",
    "RefreshRequest",
    "RegisterFields",
    "TokenPair",
    "error_payload",
]
