"""Classified errors raised by the account and session services.

Each error carries the HTTP status the API layer responds with; services never
build responses themselves.
"""


class AccountError(Exception):
    """Base class for account/session errors with a status classification."""

    status_code: int = 500
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AccountError):
    """Missing or blank required fields, or missing required media."""

    status_code = 400
    default_message = "All fields are required"


class AuthenticationError(AccountError):
    """Credentials did not verify."""

    status_code = 401
    default_message = "Invalid user credentials"


class InvalidTokenError(AccountError):
    """Token signature, expiry, type or revocation check failed."""

    status_code = 401
    default_message = "Invalid or expired token"


class NotFoundError(AccountError):
    status_code = 404
    default_message = "User does not exist"


class ConflictError(AccountError):
    status_code = 409
    default_message = "User with email or username already exists"


class InternalError(AccountError):
    """Hashing, signing or persistence failed. The message is safe to return to clients."""

    status_code = 500
    default_message = "Something went wrong while processing the request"
