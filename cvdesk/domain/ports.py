from __future__ import annotations
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence

from .entities import CandidateFile, ExternalList, SearchMode

ContactId = str
ListId = str
ItemId = str

# (bytes_sent, bytes_total); invoked from the transport thread.
ProgressFn = Callable[[int, int], None]


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable).

    ``kind`` classifies the failure for the display layer: ``validation``,
    ``unreachable``, ``timeout``, ``rejected``, ``invalid_response`` or
    ``error``.
    """

    def __init__(
        self,
        code: str,
        message: str,
        *,
        kind: str = "error",
        meta: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.kind = kind
        self.meta: Dict[str, Any] = dict(meta or {})


def validation_error(code: str, message: str) -> UseCaseError:
    """Build a ``UseCaseError`` raised before any network call."""
    return UseCaseError(code, message, kind="validation")


# ---- Ports (Hexagonal boundaries) ----
class ResumeParserPort(Protocol):
    """Upload one resume file and return the parsed record (JSON object)."""

    def parse_resume(
        self, file: CandidateFile, on_progress: Optional[ProgressFn] = None
    ) -> Dict[str, Any]: ...


class CandidateSearchPort(Protocol):
    """Keyword search over parsed candidates."""

    def search(self, terms: Sequence[str], mode: SearchMode) -> List[Dict[str, Any]]: ...


class ContactListPort(Protocol):
    """External CRM list catalog and membership operations."""

    def list_lists(self) -> List[ExternalList]: ...
    def create_list(self, name: str) -> ListId: ...
    def add_contacts(self, list_id: ListId, contact_ids: Sequence[ContactId]) -> Optional[int]: ...


class StoragePort(Protocol):
    """Persistence for user preferences and the operator session."""

    def save_user_prefs(self, prefs: Dict) -> None: ...
    def load_user_prefs(self) -> Dict: ...
    def save_session(self, payload: Dict) -> None: ...
    def load_session(self) -> Optional[Dict]: ...
    def clear_session(self) -> None: ...
