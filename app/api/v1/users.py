"""Account endpoints: register, login, logout, token refresh, password change, current user."""

from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile

from app.api.v1.auth import get_current_user, get_session_coordinator
from app.core.config import Settings, get_settings
from app.core.errors import ValidationError
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
from app.schemas.response import ApiResponse, EmptyData
from app.services.cookies import REFRESH_COOKIE, clear_token_cookies, set_token_cookies
from app.services.media import remove_local_file
from app.services.sessions import SessionCoordinator

router = APIRouter()


def _has_file(upload: UploadFile | None) -> bool:
    """True if the multipart part actually carried a file (browsers send empty parts)."""
    return upload is not None and bool(upload.filename)


async def _save_temp_upload(upload: UploadFile, settings: Settings) -> Path:
    """Write an uploaded part to UPLOAD_TMP_DIR and return its local path."""
    content = await upload.read()
    if len(content) > settings.MAX_UPLOAD_FILE_BYTES:
        raise ValidationError(
            f"File size must not exceed {settings.MAX_UPLOAD_FILE_BYTES // (1024 * 1024)} MB"
        )
    tmp_dir = Path(settings.UPLOAD_TMP_DIR)
    tmp_dir.mkdir(parents=True, exist_ok=True)
    suffix = Path(upload.filename or "").suffix
    with NamedTemporaryFile(dir=tmp_dir, suffix=suffix, delete=False) as tmp:
        tmp.write(content)
    return Path(tmp.name)


@router.post("/register", response_model=ApiResponse[AccountPublic], status_code=201)
async def register(
    coordinator: Annotated[SessionCoordinator, Depends(get_session_coordinator)],
    settings: Annotated[Settings, Depends(get_settings)],
    full_name: Annotated[str | None, Form(alias="fullName")] = None,
    email: Annotated[str | None, Form()] = None,
    username: Annotated[str | None, Form()] = None,
    password: Annotated[str | None, Form()] = None,
    avatar: Annotated[UploadFile | None, File()] = None,
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
) -> ApiResponse[AccountPublic]:
    """
    Register a new account.

    Send `multipart/form-data` with fields `fullName`, `email`, `username`,
    `password`, a required `avatar` file and an optional `coverImage` file.
    """
    saved: list[Path] = []
    try:
        avatar_path = None
        cover_path = None
        if _has_file(avatar):
            avatar_path = await _save_temp_upload(avatar, settings)
            saved.append(avatar_path)
        if _has_file(cover_image):
            cover_path = await _save_temp_upload(cover_image, settings)
            saved.append(cover_path)

        account = await coordinator.register(
            RegisterFields(
                full_name=full_name,
                email=email,
                username=username,
                password=password,
            ),
            avatar_path=avatar_path,
            cover_image_path=cover_path,
        )
    finally:
        for path in saved:
            remove_local_file(path)
    return ApiResponse(status_code=201, data=account, message="User registered successfully")


@router.post("/login", response_model=ApiResponse[LoginResult])
def login(
    body: LoginRequest,
    response: Response,
    coordinator: Annotated[SessionCoordinator, Depends(get_session_coordinator)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ApiResponse[LoginResult]:
    """
    Authenticate with username or email and password.

    Both tokens are returned in the body and set as HttpOnly cookies
    (`accessToken`, `refreshToken`).
    """
    result = coordinator.login(body.username, body.email, body.password)
    set_token_cookies(response, result.access_token, result.refresh_token, settings)
    return ApiResponse(data=result, message="User logged in successfully")


@router.post("/logout", response_model=ApiResponse[EmptyData])
def logout(
    response: Response,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    coordinator: Annotated[SessionCoordinator, Depends(get_session_coordinator)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ApiResponse[EmptyData]:
    """End the caller's session and clear both token cookies."""
    coordinator.logout(current_user.id)
    clear_token_cookies(response, settings)
    return ApiResponse(data=EmptyData(), message="User logged out")


@router.post("/refresh-token", response_model=ApiResponse[TokenPair])
def refresh_token(
    request: Request,
    response: Response,
    coordinator: Annotated[SessionCoordinator, Depends(get_session_coordinator)],
    settings: Annotated[Settings, Depends(get_settings)],
    body: RefreshRequest | None = None,
) -> ApiResponse[TokenPair]:
    """Issue a new access token and rotate the refresh token (body, else cookie)."""
    presented = (body.refresh_token if body else None) or request.cookies.get(REFRESH_COOKIE)
    tokens = coordinator.refresh(presented)
    set_token_cookies(response, tokens.access_token, tokens.refresh_token, settings)
    return ApiResponse(data=tokens, message="Access token refreshed")


@router.post("/change-password", response_model=ApiResponse[EmptyData])
def change_password(
    body: ChangePasswordRequest,
    response: Response,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    coordinator: Annotated[SessionCoordinator, Depends(get_session_coordinator)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ApiResponse[EmptyData]:
    """Change the caller's password. The current session ends; log in again afterwards."""
    coordinator.change_password(current_user.id, body.old_password, body.new_password)
    clear_token_cookies(response, settings)
    return ApiResponse(data=EmptyData(), message="Password changed successfully")


@router.get("/current-user", response_model=ApiResponse[AccountPublic])
def get_current_account(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    coordinator: Annotated[SessionCoordinator, Depends(get_session_coordinator)],
) -> ApiResponse[AccountPublic]:
    return ApiResponse(
        data=coordinator.current_account(current_user.id),
        message="Current user fetched successfully",
    )
