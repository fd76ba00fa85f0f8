"""Domain value objects shared across adapters, use-cases, and view models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

UploadStatus = Literal["queued", "uploading", "succeeded", "failed"]
SearchMode = Literal["or", "and"]
SearchPhase = Literal["idle", "searching", "completed", "failed"]
SyncMode = Literal["create", "existing"]
SyncStatus = Literal["completed", "partial", "attach_failed"]

TERMINAL_UPLOAD_STATES = {"succeeded", "failed"}
SEARCH_MODES: Tuple[SearchMode, ...] = ("or", "and")


def _as_text(value: Any) -> Optional[str]:
    """Return stripped text or ``None`` for empty/absent values."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        parts = [str(item).strip() for item in value if str(item).strip()]
        return ", ".join(parts) or None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class CandidateFile:
    """A resume file picked by the operator, either on disk or in memory."""

    name: str
    size: int
    path: Optional[Path] = None
    content: Optional[bytes] = None

    @classmethod
    def from_path(cls, path: str | Path) -> "CandidateFile":
        resolved = Path(path).expanduser()
        return cls(name=resolved.name, size=resolved.stat().st_size, path=resolved)

    @classmethod
    def from_bytes(cls, name: str, content: bytes) -> "CandidateFile":
        return cls(name=name, size=len(content), content=content)

    @property
    def extension(self) -> str:
        """Lower-cased suffix after the last dot, without the dot."""
        if "." not in self.name:
            return ""
        return self.name.rsplit(".", 1)[-1].strip().lower()

    def read_bytes(self) -> bytes:
        if self.content is not None:
            return self.content
        if self.path is None:
            raise ValueError(f"No content available for '{self.name}'")
        return self.path.read_bytes()


@dataclass(frozen=True)
class ParsedResume:
    """Parsed record returned by the resume parser. ``raw`` keeps the payload verbatim."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    job_title: Optional[str] = None
    skills: Optional[str] = None
    experience: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ParsedResume":
        return cls(
            name=_as_text(payload.get("name")),
            email=_as_text(payload.get("email")),
            phone=_as_text(payload.get("phone")),
            job_title=_as_text(payload.get("job_title")),
            skills=_as_text(payload.get("skills")),
            experience=_as_text(payload.get("experience")),
            raw=dict(payload),
        )


@dataclass(frozen=True)
class UploadItem:
    """One file's upload/parse lifecycle record."""

    item_id: str
    file: CandidateFile
    status: UploadStatus = "queued"
    progress: float = 0.0
    parsed: Optional[ParsedResume] = None
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_UPLOAD_STATES


@dataclass(frozen=True)
class SearchResult:
    """One candidate row returned by the search endpoint."""

    contact_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    job_title: Optional[str] = None
    full_text: Optional[str] = None
    skills: Optional[str] = None
    matched_keywords: Tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "SearchResult":
        keywords_raw = payload.get("matched_keywords")
        if isinstance(keywords_raw, (list, tuple)):
            keywords = tuple(str(k).strip() for k in keywords_raw if str(k).strip())
        else:
            keywords = ()
        contact_raw = payload.get("contact_id")
        if contact_raw is None:
            contact_raw = payload.get("id")
        return cls(
            contact_id=str(contact_raw).strip() if contact_raw is not None else "",
            name=_as_text(payload.get("name")),
            email=_as_text(payload.get("email")),
            job_title=_as_text(payload.get("job_title")),
            full_text=_as_text(payload.get("full_text")),
            skills=_as_text(payload.get("skills")),
            matched_keywords=keywords,
        )


@dataclass(frozen=True)
class LastQuery:
    """Snapshot of the term set and mode of the most recent committed search."""

    terms: Tuple[str, ...]
    mode: SearchMode


@dataclass(frozen=True)
class ExternalList:
    """Named contact list in the downstream CRM."""

    list_id: str
    name: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ExternalList":
        list_id = payload.get("listId")
        if list_id is None:
            list_id = payload.get("list_id", payload.get("id"))
        normalized = str(list_id).strip() if list_id is not None else ""
        if not normalized:
            raise ValueError("Missing listId in list payload.")
        return cls(list_id=normalized, name=str(payload.get("name") or "").strip())


@dataclass(frozen=True)
class SyncOutcome:
    """Result of a create-and-attach or attach-to-existing call.

    ``attach_failed`` means the list was created remotely but no contacts were
    confirmed as attached; ``partial`` means fewer contacts were attached than
    requested.
    """

    status: SyncStatus
    mode: SyncMode
    list_id: str
    list_name: str
    requested: int
    added: int
    message: str
    error: Optional[str] = None

    @property
    def list_created(self) -> bool:
        return self.mode == "create"

    @property
    def is_partial(self) -> bool:
        return self.status != "completed"


__all__ = [
    "CandidateFile",
    "ExternalList",
    "LastQuery",
    "ParsedResume",
    "SEARCH_MODES",
    "SearchMode",
    "SearchPhase",
    "SearchResult",
    "SyncMode",
    "SyncOutcome",
    "SyncStatus",
    "TERMINAL_UPLOAD_STATES",
    "UploadItem",
    "UploadStatus",
]
