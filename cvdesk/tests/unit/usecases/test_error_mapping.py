from cvdesk.adapters.api_errors import (
    ApiClientError,
    ApiResponseError,
    ApiServerError,
    ApiTimeoutError,
    ApiUnreachableError,
)
from cvdesk.domain.ports import UseCaseError
from cvdesk.usecases.error_mapping import map_api_error


def test_unreachable_names_backend_origin() -> None:
    exc = ApiUnreachableError("boom", endpoint="http://127.0.0.1:8000/search/?keywords=x")

    err = map_api_error(exc, default_code="SEARCH_FAILED", default_message="Search failed")

    assert err.kind == "unreachable"
    assert err.code == "BACKEND_UNREACHABLE"
    assert "http://127.0.0.1:8000." in err.message
    assert err.meta["endpoint"].startswith("http://127.0.0.1:8000/search/")


def test_timeout_is_distinct_from_unreachable() -> None:
    err = map_api_error(
        ApiTimeoutError("slow"), default_code="X", timeout_message="Search request timed out. Please try again."
    )

    assert err.kind == "timeout"
    assert err.message == "Search request timed out. Please try again."


def test_rejection_prefers_server_detail() -> None:
    exc = ApiClientError("ctx", status=400, reason="Bad Request", detail="Keyword too short")

    err = map_api_error(exc, default_code="SEARCH_FAILED", default_message="Search failed")

    assert err.kind == "rejected"
    assert err.message == "Keyword too short"
    assert err.meta["status"] == 400


def test_rejection_without_detail_uses_status_text() -> None:
    exc = ApiServerError("ctx", status=503, reason="Service Unavailable")

    err = map_api_error(exc, default_code="SEARCH_FAILED", default_message="Search failed")

    assert err.message == "Search failed: Service Unavailable"


def test_unparsable_body() -> None:
    err = map_api_error(ApiResponseError("bad json"), default_code="UPLOAD_FAILED")

    assert err.kind == "invalid_response"
    assert err.message == "Failed to parse server response"


def test_use_case_error_passes_through_and_unknown_falls_back() -> None:
    original = UseCaseError("X", "already mapped", kind="validation")
    assert map_api_error(original, default_code="Y") is original

    err = map_api_error(RuntimeError("kaboom"), default_code="LIST_CREATE_FAILED", default_message="Failed to create list")
    assert err.code == "LIST_CREATE_FAILED"
    assert err.message == "Failed to create list"
    assert err.kind == "error"
