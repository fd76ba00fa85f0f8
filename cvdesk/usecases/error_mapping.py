"""Translate adapter errors into user-facing UseCaseError instances."""

from __future__ import annotations

from typing import Optional

from cvdesk.adapters.api_errors import (
    ApiError,
    ApiResponseError,
    ApiTimeoutError,
    ApiUnreachableError,
)
from cvdesk.domain.ports import UseCaseError


def map_api_error(
    exc: Exception,
    *,
    default_code: str,
    default_message: Optional[str] = None,
    timeout_message: str = "Request timed out. Please try again.",
) -> UseCaseError:
    """Map adapter exceptions to stable UseCaseError codes.

    Args:
        exc: Exception raised by an adapter (or already a ``UseCaseError``).
        default_code: Code used for unexpected, non-adapter exceptions.
        default_message: Label for the failed operation, e.g. ``"Search failed"``.
            Server rejections without a detail message read
            ``"<label>: <status text>"``.
        timeout_message: Message for expired waits.

    Returns:
        UseCaseError: Value returned to the caller.
    """
    if isinstance(exc, UseCaseError):
        return exc
    if isinstance(exc, ApiTimeoutError):
        return UseCaseError("REQUEST_TIMEOUT", timeout_message, kind="timeout")
    if isinstance(exc, ApiUnreachableError):
        return UseCaseError(
            "BACKEND_UNREACHABLE",
            f"Cannot connect to backend server at {_origin(exc.endpoint)}. "
            "Please ensure the backend server is running.",
            kind="unreachable",
            meta={"endpoint": exc.endpoint},
        )
    if isinstance(exc, ApiResponseError):
        return UseCaseError(
            "INVALID_RESPONSE", "Failed to parse server response", kind="invalid_response"
        )
    if isinstance(exc, ApiError):
        status = exc.status or 0
        if exc.detail:
            message = exc.detail
        else:
            status_text = exc.reason or (f"HTTP {status}" if status else str(exc))
            message = _compose_error_message(default_message or "Request failed", status_text)
        return UseCaseError(
            "SERVER_REJECTED", message, kind="rejected", meta={"status": status}
        )

    message = default_message or str(exc) or "Unexpected error."
    return UseCaseError(default_code, message)


def _compose_error_message(base: str, hint: Optional[str]) -> str:
    """Compose a user-facing error message with optional hint text."""
    hint_text = (hint or "").strip()
    if hint_text:
        return f"{base}: {hint_text}"
    if base.endswith("."):
        return base
    return f"{base}."


def _origin(url: str) -> str:
    """Return ``scheme://host[:port]`` of ``url`` for operator messages."""
    text = (url or "").strip()
    if "://" not in text:
        return text
    scheme, rest = text.split("://", 1)
    return f"{scheme}://{rest.split('/', 1)[0]}"


__all__ = ["map_api_error"]
