"""REST adapter for candidate keyword search (`/search/`)."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from cvdesk.adapters.api_errors import json_list, raise_for_response
from cvdesk.adapters.http_client import HttpConfig, RetryingSession
from cvdesk.domain.entities import SEARCH_MODES, SearchMode
from cvdesk.domain.ports import CandidateSearchPort


class SearchRestAdapter(CandidateSearchPort):
    """HTTP adapter sending all terms as repeated ``keywords`` query params."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        search_timeout_s: float = 15,
        retries: int = 0,
    ) -> None:
        if not (base_url or "").strip():
            raise ValueError("SearchRestAdapter requires a base URL")
        self.base_url = base_url.strip().rstrip("/")
        self.cfg = HttpConfig(search_timeout_s=search_timeout_s, retries=retries)
        self.session = RetryingSession(api_key, self.cfg)

    def search(self, terms: Sequence[str], mode: SearchMode) -> List[Dict[str, Any]]:
        """Return raw result records; non-object entries are dropped."""
        if mode not in SEARCH_MODES:
            raise ValueError(f"Unsupported search mode '{mode}'")
        params = [("keywords", term) for term in terms]
        params.append(("mode", mode))
        url = f"{self.base_url}/search/"
        resp = self.session.get(url, params=params, timeout=self.cfg.search_timeout_s)
        raise_for_response(resp, "search")
        records = json_list(resp, "search", key="results")
        return [dict(item) for item in records if isinstance(item, dict)]


__all__ = ["SearchRestAdapter"]
