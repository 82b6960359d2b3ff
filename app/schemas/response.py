"""Uniform response envelopes for success and error payloads."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, computed_field

from app.schemas.auth import CamelModel

T = TypeVar("T")


class ApiResponse(CamelModel, Generic[T]):
    """Success envelope: statusCode, data, message, success."""

    status_code: int = Field(default=200)
    data: T
    message: str = Field(default="Success")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def success(self) -> bool:
        return self.status_code < 400


class EmptyData(BaseModel):
    """Placeholder data for responses without a body (e.g. logout)."""


def error_payload(
    status_code: int,
    message: str,
    errors: list[Any] | None = None,
) -> dict[str, Any]:
    """Error envelope; mirrors ApiResponse with success=false and data=null."""
    return {
        "statusCode": status_code,
        "data": None,
        "message": message,
        "success": False,
        "errors": errors or [],
    }
