from __future__ import annotations

import types
from typing import Any, Dict, List

import pytest

from cvdesk.adapters.api_errors import ApiClientError, ApiResponseError
from cvdesk.adapters.contact_list_rest import ContactListRestAdapter
from cvdesk.adapters.parser_rest import ParserRestAdapter
from cvdesk.adapters.search_rest import SearchRestAdapter
from cvdesk.domain.entities import CandidateFile, ExternalList


def _ok(payload: Any, status: int = 200):
    return types.SimpleNamespace(status_code=status, reason="OK", text="", json=lambda: payload)


class _SessionStub:
    def __init__(self, response) -> None:
        self.response = response
        self.calls: List[Dict[str, Any]] = []

    def get(self, url: str, *, params=None, timeout=None):
        self.calls.append({"method": "GET", "url": url, "params": params, "timeout": timeout})
        return self.response

    def post(self, url: str, *, json_body=None, timeout=None):
        self.calls.append({"method": "POST", "url": url, "json": json_body, "timeout": timeout})
        return self.response

    def post_multipart(self, url: str, **kwargs: Any):
        self.calls.append({"method": "POST", "url": url, **kwargs})
        on_progress = kwargs.get("on_progress")
        if on_progress:
            on_progress(len(kwargs["content"]), len(kwargs["content"]))
        return self.response


def test_search_sends_repeated_keywords_and_mode() -> None:
    adapter = SearchRestAdapter("http://api:8000/", search_timeout_s=15)
    adapter.session = _SessionStub(_ok({"results": [{"contact_id": "1"}, "junk"], "mode": "and"}))

    records = adapter.search(("python", "sql"), "and")

    assert records == [{"contact_id": "1"}]
    call = adapter.session.calls[0]
    assert call["url"] == "http://api:8000/search/"
    assert call["params"] == [("keywords", "python"), ("keywords", "sql"), ("mode", "and")]
    assert call["timeout"] == 15


def test_search_rejects_unknown_mode() -> None:
    adapter = SearchRestAdapter("http://api")
    with pytest.raises(ValueError):
        adapter.search(("x",), "xor")


def test_parser_uploads_file_field_with_mime_type() -> None:
    adapter = ParserRestAdapter("http://parser")
    adapter.session = _SessionStub(_ok({"name": "Ann", "email": None}))
    ticks = []

    parsed = adapter.parse_resume(
        CandidateFile.from_bytes("cv.pdf", b"%PDF"), lambda sent, total: ticks.append((sent, total))
    )

    assert parsed == {"name": "Ann", "email": None}
    call = adapter.session.calls[0]
    assert call["url"] == "http://parser/parse_resume/"
    assert call["field"] == "file"
    assert call["mime_type"] == "application/pdf"
    assert ticks == [(4, 4)]


def test_parser_non_object_body_is_response_error() -> None:
    adapter = ParserRestAdapter("http://parser")
    adapter.session = _SessionStub(_ok(["unexpected"]))

    with pytest.raises(ApiResponseError):
        adapter.parse_resume(CandidateFile.from_bytes("cv.doc", b"x"))


def test_list_catalog_posts_processing_types_and_skips_bad_rows() -> None:
    adapter = ContactListRestAdapter("http://api", processing_types=("MANUAL",), limit=5)
    adapter.session = _SessionStub(
        _ok({"lists": [{"listId": "11", "name": "Q1"}, {"name": "no id"}], "paging": {"next": {"after": "x"}}})
    )

    assert adapter.list_lists() == [ExternalList("11", "Q1")]
    call = adapter.session.calls[0]
    assert call["url"] == "http://api/hubspot/lists/search"
    assert call["json"] == {"processingTypes": ["MANUAL"], "limit": 5}


def test_create_list_requires_list_id() -> None:
    adapter = ContactListRestAdapter("http://api")
    adapter.session = _SessionStub(_ok({"list": {"listId": 99}}))
    assert adapter.create_list("Q1 Hires") == "99"

    adapter.session = _SessionStub(_ok({"name": "Q1 Hires"}))
    with pytest.raises(ApiResponseError):
        adapter.create_list("Q1 Hires")


def test_add_contacts_returns_count_or_none() -> None:
    adapter = ContactListRestAdapter("http://api")
    adapter.session = _SessionStub(_ok({"num_added": 2}))

    assert adapter.add_contacts("list/1", ["a", "b", "c"]) == 2
    call = adapter.session.calls[0]
    assert call["url"] == "http://api/hubspot/lists/list%2F1/add_contacts"
    assert call["json"] == {"contact_ids": ["a", "b", "c"]}

    adapter.session = _SessionStub(_ok({}))
    assert adapter.add_contacts("1", ["a"]) is None


def test_add_contacts_rejection_raises_client_error() -> None:
    adapter = ContactListRestAdapter("http://api")
    adapter.session = _SessionStub(
        types.SimpleNamespace(status_code=404, reason="Not Found", text="", json=lambda: {"detail": "No list"})
    )

    with pytest.raises(ApiClientError):
        adapter.add_contacts("1", ["a"])
