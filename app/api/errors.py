"""Map classified account errors and unexpected failures to JSON error responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.errors import AccountError, InternalError, InvalidTokenError
from app.schemas.response import error_payload

logger = logging.getLogger(__name__)


async def account_error_handler(request: Request, exc: AccountError) -> JSONResponse:
    """Respond with the error's own status and message."""
    if isinstance(exc, InternalError):
        # Cause was already logged where it happened; the client only gets the generic message.
        logger.error(
            "Request failed with internal error",
            extra={"path": request.url.path, "method": request.method},
        )
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, InvalidTokenError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(exc.status_code, exc.message),
        headers=headers,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Request body/form did not match the schema."""
    errors = [
        {
            "field": ".".join(str(item) for item in err.get("loc", []) if item != "body"),
            "message": err.get("msg"),
            "type": err.get("type"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content=error_payload(422, "Request validation failed", errors),
    )


async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Uncaught exceptions: log server-side, never leak details."""
    logger.exception(
        "Unhandled exception",
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_payload(
            status.HTTP_500_INTERNAL_SERVER_ERROR, InternalError.default_message
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AccountError, account_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unexpected_exception_handler)
