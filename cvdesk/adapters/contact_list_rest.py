"""REST adapter for CRM contact lists (`/hubspot/lists*`)."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence
from urllib.parse import quote

from cvdesk.adapters.api_errors import (
    ApiResponseError,
    json_list,
    json_object,
    raise_for_response,
)
from cvdesk.adapters.http_client import HttpConfig, RetryingSession
from cvdesk.domain.entities import ExternalList
from cvdesk.domain.ports import ContactId, ContactListPort, ListId

LOGGER = logging.getLogger(__name__)

DEFAULT_PROCESSING_TYPES = ("MANUAL", "DYNAMIC")


class ContactListRestAdapter(ContactListPort):
    """HTTP adapter for list catalog, list creation and contact attachment."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        request_timeout_s: float = 10,
        processing_types: Sequence[str] = DEFAULT_PROCESSING_TYPES,
        limit: int = 100,
        retries: int = 0,
    ) -> None:
        if not (base_url or "").strip():
            raise ValueError("ContactListRestAdapter requires a base URL")
        self.base_url = base_url.strip().rstrip("/")
        self.processing_types = tuple(processing_types)
        self.limit = int(limit)
        self.cfg = HttpConfig(request_timeout_s=request_timeout_s, retries=retries)
        self.session = RetryingSession(api_key, self.cfg)

    def list_lists(self) -> List[ExternalList]:
        """Fetch the first catalog page; the paging cursor is not followed."""
        resp = self.session.post(
            self._url("/hubspot/lists/search"),
            json_body={"processingTypes": list(self.processing_types), "limit": self.limit},
        )
        raise_for_response(resp, "list_lists")
        records = json_list(resp, "list_lists", key="lists", fallback_keys=("results",))
        lists: List[ExternalList] = []
        for item in records:
            if not isinstance(item, dict):
                continue
            try:
                lists.append(ExternalList.from_payload(item))
            except ValueError:
                LOGGER.debug("Skipping list entry without id: %r", item)
        return lists

    def create_list(self, name: str) -> ListId:
        resp = self.session.post(
            self._url("/hubspot/lists/create"), json_body={"name": name}
        )
        raise_for_response(resp, "create_list")
        payload = json_object(resp, "create_list")
        list_id = self._extract_list_id(payload)
        if not list_id:
            raise ApiResponseError(
                "Failed to get list ID from created list", context="create_list"
            )
        return list_id

    def add_contacts(self, list_id: ListId, contact_ids: Sequence[ContactId]) -> Optional[int]:
        """Attach contacts; returns the backend's ``num_added`` or ``None`` if absent."""
        path = f"/hubspot/lists/{quote(str(list_id), safe='')}/add_contacts"
        resp = self.session.post(
            self._url(path), json_body={"contact_ids": [str(c) for c in contact_ids]}
        )
        raise_for_response(resp, "add_contacts")
        payload = json_object(resp, "add_contacts")
        return self._as_count(payload.get("num_added"))

    # ------------------------------------------------------------------
    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    @staticmethod
    def _extract_list_id(payload: dict) -> str:
        candidates: List[Any] = [payload.get("listId"), payload.get("list_id")]
        nested = payload.get("list")
        if isinstance(nested, dict):
            candidates.append(nested.get("listId"))
        for value in candidates:
            if value is not None and str(value).strip():
                return str(value).strip()
        return ""

    @staticmethod
    def _as_count(value: Any) -> Optional[int]:
        if value is None or isinstance(value, bool):
            return None
        try:
            return max(0, int(value))
        except (TypeError, ValueError):
            return None


__all__ = ["ContactListRestAdapter", "DEFAULT_PROCESSING_TYPES"]
