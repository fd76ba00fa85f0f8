from __future__ import annotations

from typing import Any, Dict, List, Optional


class ApiError(RuntimeError):
    """Base class for REST adapter failures."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        reason: Optional[str] = None,
        detail: Optional[str] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.reason = reason
        self.detail = detail
        self.payload = payload
        self.context = context


class ApiClientError(ApiError):
    """HTTP 4xx from the backend."""


class ApiServerError(ApiError):
    """HTTP 5xx from the backend."""


class ApiTimeoutError(ApiError):
    """The bounded wait for a response expired."""

    def __init__(self, message: str, *, context: Optional[str] = None) -> None:
        super().__init__(message, context=context)


class ApiUnreachableError(ApiError):
    """Connection refused, DNS failure or other connectivity error."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: str,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message, context=context)
        self.endpoint = endpoint


class ApiResponseError(ApiError):
    """Success status but an unparsable or mis-shaped body."""


def raise_for_response(resp: Any, ctx: str) -> None:
    """Raise typed adapter errors for non-2xx responses."""
    status = int(getattr(resp, "status_code", 0) or 0)
    if 200 <= status < 300:
        return
    payload = parse_error_payload(resp)
    reason = (getattr(resp, "reason", None) or "").strip() or None
    # Only structured bodies carry a server detail; raw text is kept in payload.
    detail = first_string(payload) if isinstance(payload, (dict, list)) else None
    message = build_error_message(ctx, status, payload)
    kwargs = dict(
        status=status, reason=reason, detail=detail, payload=payload, context=ctx
    )
    if 400 <= status < 500:
        raise ApiClientError(message, **kwargs)
    if 500 <= status < 600:
        raise ApiServerError(message, **kwargs)
    raise ApiError(message, **kwargs)


def json_object(resp: Any, ctx: str) -> Dict[str, Any]:
    """Parse response JSON and require an object payload."""
    payload = _json(resp, ctx)
    if not isinstance(payload, dict):
        raise ApiResponseError(f"{ctx}: expected JSON object", context=ctx)
    return dict(payload)


def json_list(resp: Any, ctx: str, *, key: str, fallback_keys: tuple[str, ...] = ()) -> List[Any]:
    """Return the list under ``key`` (or the bare list body)."""
    payload = _json(resp, ctx)
    if isinstance(payload, list):
        return list(payload)
    if not isinstance(payload, dict):
        raise ApiResponseError(f"{ctx}: expected JSON object or list", context=ctx)
    for name in (key, *fallback_keys):
        value = payload.get(name)
        if value is None:
            continue
        if not isinstance(value, list):
            raise ApiResponseError(f"{ctx}: '{name}' is not a list", context=ctx)
        return list(value)
    return []


def _json(resp: Any, ctx: str) -> Any:
    try:
        return resp.json()
    except Exception as exc:
        snippet = (getattr(resp, "text", "") or "")[:400]
        raise ApiResponseError(
            f"{ctx}: invalid JSON response: {snippet}", context=ctx
        ) from exc


def parse_error_payload(resp: Any) -> Any:
    """Best-effort extraction of error payload without raising."""
    try:
        return resp.json()
    except Exception:
        snippet = getattr(resp, "text", "")
        if not snippet:
            return None
        return snippet[:400]


def build_error_message(ctx: str, status: int, payload: Any) -> str:
    detail = first_string(payload)
    if detail:
        return f"{ctx}: {detail} (HTTP {status})"
    return f"{ctx}: HTTP {status}"


def first_string(payload: Any) -> Optional[str]:
    if isinstance(payload, str):
        text = payload.strip()
        return text or None
    if isinstance(payload, dict):
        for key in ("detail", "message", "error", "title"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if isinstance(value, list):
                candidate = first_string(value)
                if candidate:
                    return candidate
            if isinstance(value, dict):
                candidate = first_string(value)
                if candidate:
                    return candidate
        # FastAPI validation errors: {"detail": [{"msg": "..."}]}
        msg = payload.get("msg")
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
    if isinstance(payload, list):
        for item in payload:
            candidate = first_string(item)
            if candidate:
                return candidate
    return None
