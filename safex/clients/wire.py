"""Helpers for reading fields out of service response bodies.

Every helper raises ProtocolError when a field has the wrong shape, so a
malformed 2xx body never escapes as a KeyError or TypeError.
"""

from datetime import datetime
from typing import Any

from safex.exceptions import ProtocolError


def get_field(data: dict[str, Any], *names: str, default: Any = None) -> Any:
    """Get the first of several alternative keys present in data."""
    for name in names:
        if name in data:
            return data[name]
    return default


def expect_object(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ProtocolError(
            "UNEXPECTED_SHAPE", f"Expected {what} to be an object"
        )
    return value


def expect_list(value: Any, what: str) -> list[Any]:
    if not isinstance(value, list):
        raise ProtocolError("UNEXPECTED_SHAPE", f"Expected {what} to be a list")
    return value


def require_success(data: dict[str, Any]) -> bool:
    """Read the mandatory boolean "success" flag."""
    success = data.get("success")
    if not isinstance(success, bool):
        raise ProtocolError(
            "MISSING_FIELD", "Response has no boolean 'success' field"
        )
    return success


def get_message(data: dict[str, Any]) -> str:
    message = data.get("message")
    if message is None:
        return ""
    if not isinstance(message, str):
        raise ProtocolError("UNEXPECTED_SHAPE", "Expected 'message' to be a string")
    return message


def get_str(
    data: dict[str, Any], *names: str, required: bool = False
) -> str | None:
    value = get_field(data, *names)
    if value is None:
        if required:
            raise ProtocolError("MISSING_FIELD", f"Missing field '{names[0]}'")
        return None
    if not isinstance(value, str):
        raise ProtocolError(
            "UNEXPECTED_SHAPE", f"Expected '{names[0]}' to be a string"
        )
    return value


def get_int(
    data: dict[str, Any], *names: str, default: int | None = None
) -> int | None:
    """Read a non-negative integer field."""
    value = get_field(data, *names)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ProtocolError(
            "UNEXPECTED_SHAPE",
            f"Expected '{names[0]}' to be a non-negative integer",
        )
    return value


def get_timestamp(data: dict[str, Any], *names: str) -> datetime | None:
    """Read an ISO 8601 timestamp; a trailing Z is read as UTC."""
    value = get_str(data, *names)
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise ProtocolError(
            "UNEXPECTED_SHAPE", f"Invalid timestamp in '{names[0]}': {value}"
        ) from e
