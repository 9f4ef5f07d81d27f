"""Response envelope helpers for consistent API responses."""

from typing import Any


def success_response(data: Any) -> dict[str, Any]:
    """Create a success response envelope."""
    return {"data": data, "error": None}


def error_response(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Create an error response envelope.

    `details` carries structured context, e.g. the readiness issues of a
    project that cannot be generated yet.
    """
    error: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {"data": None, "error": error}
