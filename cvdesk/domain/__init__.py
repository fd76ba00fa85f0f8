
"""Domain package exports for value objects and rules."""

from .entities import (
    CandidateFile,
    ExternalList,
    LastQuery,
    ParsedResume,
    SearchMode,
    SearchPhase,
    SearchResult,
    SyncOutcome,
    UploadItem,
    UploadStatus,
)
from .files import FileCheck, format_file_size, validate_file
from .search_terms import SearchTermSet

__all__ = [
    "CandidateFile",
    "ExternalList",
    "FileCheck",
    "LastQuery",
    "ParsedResume",
    "SearchMode",
    "SearchPhase",
    "SearchResult",
    "SearchTermSet",
    "SyncOutcome",
    "UploadItem",
    "UploadStatus",
    "format_file_size",
    "validate_file",
]
