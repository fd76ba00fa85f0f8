"""REST adapter for the resume parsing endpoint (`/parse_resume/`)."""

from __future__ import annotations

from typing import Any, Dict, Optional

from cvdesk.adapters.api_errors import json_object, raise_for_response
from cvdesk.adapters.http_client import HttpConfig, RetryingSession
from cvdesk.domain.entities import CandidateFile
from cvdesk.domain.ports import ProgressFn, ResumeParserPort

_MIME_TYPES = {
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


class ParserRestAdapter(ResumeParserPort):
    """Uploads one resume per request as multipart field ``file``."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        upload_timeout_s: float = 15,
        retries: int = 0,
    ) -> None:
        if not (base_url or "").strip():
            raise ValueError("ParserRestAdapter requires a base URL")
        self.base_url = base_url.strip().rstrip("/")
        self.cfg = HttpConfig(upload_timeout_s=upload_timeout_s, retries=retries)
        self.session = RetryingSession(api_key, self.cfg)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/parse_resume/"

    def parse_resume(
        self, file: CandidateFile, on_progress: Optional[ProgressFn] = None
    ) -> Dict[str, Any]:
        """Upload ``file`` and return the parsed record exactly as received."""
        ctx = f"parse_resume[{file.name}]"
        resp = self.session.post_multipart(
            self.endpoint,
            field="file",
            filename=file.name,
            content=file.read_bytes(),
            mime_type=_MIME_TYPES.get(file.extension, "application/octet-stream"),
            on_progress=on_progress,
            timeout=self.cfg.upload_timeout_s,
        )
        raise_for_response(resp, ctx)
        return json_object(resp, ctx)


__all__ = ["ParserRestAdapter"]
