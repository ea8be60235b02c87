"""Generic API response envelope."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiError(BaseModel):
    """Structured error detail."""

    code: str
    message: str
    field: str | None = None


class ApiResponse(BaseModel, Generic[T]):
    """Standard response envelope wrapping all API responses."""

    status: str = "success"
    data: T | None = None
    errors: list[ApiError] = []
    meta: dict = {}


def success_response(data: object, **meta: object) -> dict:
    """Build a success envelope dict."""
    return {
        "status": "success",
        "data": data,
        "errors": [],
        "meta": meta,
    }


def error_response(errors: list[ApiError]) -> dict:
    """Build an error envelope dict.

    ``error`` repeats the first message so clients can read a single string.
    """
    return {
        "status": "error",
        "error": errors[0].message if errors else "Unknown error",
        "data": None,
        "errors": [e.model_dump() for e in errors],
        "meta": {},
    }
