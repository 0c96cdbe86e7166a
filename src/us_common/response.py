"""Unified API error body.

Successful responses return the resource projection as-is. Every failure
returns this shape:
{
    "timestamp": "2026-10-19T09:20:00+00:00",
    "status": 404,
    "error": "Not Found",
    "message": "User id=7 not found",
    "path": "/api/users/7",
    "errors": ["name: ..."]      // only for validation failures
}
"""

from collections.abc import Sequence
from http import HTTPStatus
from typing import Any

from pydantic import BaseModel, Field

from src.us_common.datetime_utils import utc_now


class ApiError(BaseModel):
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    status: int
    error: str
    message: str
    path: str
    errors: list[str] | None = None


def _reason_phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown"


def error_response(
    status: int,
    message: str,
    path: str,
    errors: list[str] | None = None,
) -> ApiError:
    return ApiError(
        status=status,
        error=_reason_phrase(status),
        message=message,
        path=path,
        errors=errors,
    )


def error_content(resp: ApiError) -> dict[str, Any]:
    """JSON-ready dict; `errors` is dropped unless a validation failure set it."""
    return resp.model_dump(mode="json", exclude_none=True)


_LOCATION_PARTS = {"body", "query", "path", "header", "cookie"}


def field_error_messages(errors: Sequence[Any]) -> list[str]:
    """Flatten FastAPI/pydantic error dicts into "field: message" strings.

    The field is the JSON name (alias) as the client sent it; custom
    validator messages are reported without pydantic's "Value error, " prefix.
    """
    messages: list[str] = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in _LOCATION_PARTS]
        field = ".".join(loc) or "body"
        msg = str(err.get("msg", "Invalid value"))
        ctx = err.get("ctx") or {}
        if err.get("type") == "value_error" and "error" in ctx:
            msg = str(ctx["error"])
        messages.append(f"{field}: {msg}")
    return messages
